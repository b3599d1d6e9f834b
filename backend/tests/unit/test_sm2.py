"""
Unit Tests for the SM-2 Scheduling Algorithm

Tests the pure scheduling math, without any database:
- Initial state
- Interval growth on consecutive successes
- Reset on failure
- Ease factor clamping
- Interval cap
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from reved.services.learning.sm2 import (
    ReviewState,
    SM2Scheduler,
    create_scheduler,
    round_half_up,
    utc_today,
)

TODAY = date(2024, 3, 1)


@pytest.fixture
def scheduler() -> SM2Scheduler:
    return SM2Scheduler()


class TestNewState:
    """Tests for the initial schedule."""

    def test_new_state_defaults(self, scheduler) -> None:
        """A new schedule starts at 1 day, ease 2.5, no reviews."""
        state = scheduler.new_state()

        assert state.interval_days == 1
        assert state.ease_factor == 2.5
        assert state.review_count == 0
        assert state.next_review_date is None

    def test_create_scheduler_uses_settings(self) -> None:
        """create_scheduler reads bounds from settings."""
        scheduler = create_scheduler()

        assert scheduler.initial_ease == 2.5
        assert scheduler.min_ease == 1.3
        assert scheduler.max_ease == 3.0
        assert scheduler.max_interval == 180

    def test_create_scheduler_max_interval_override(self) -> None:
        scheduler = create_scheduler(max_interval=30)
        assert scheduler.max_interval == 30


class TestSuccess:
    """Tests for successful reviews."""

    def test_first_success_schedules_next_day(self, scheduler) -> None:
        """First success always schedules the next review at +1 day."""
        state = scheduler.review(scheduler.new_state(), succeeded=True, today=TODAY)

        assert state.review_count == 1
        assert state.interval_days == 1
        assert state.ease_factor == 2.6
        assert state.next_review_date == TODAY + timedelta(days=1)
        assert state.last_outcome is True

    def test_second_success_uses_ease(self, scheduler) -> None:
        """Second success multiplies the interval by the updated ease."""
        state = scheduler.new_state()
        state = scheduler.review(state, True, TODAY)
        state = scheduler.review(state, True, TODAY)

        assert state.review_count == 2
        assert state.ease_factor == 2.7
        assert state.interval_days == 3  # round(1 × 2.7)
        assert state.next_review_date == TODAY + timedelta(days=3)

    def test_consecutive_success_sequence(self, scheduler) -> None:
        """Intervals grow 1, 3, 8, 23, 69 then hit the 180 day cap."""
        state = scheduler.new_state()
        intervals = []
        for _ in range(7):
            state = scheduler.review(state, True, TODAY)
            intervals.append(state.interval_days)

        assert intervals == [1, 3, 8, 23, 69, 180, 180]

    def test_growth_is_strict_at_minimum_ease(self, scheduler) -> None:
        """At the lowest ease the interval still grows by at least one day."""
        state = ReviewState(interval_days=1, ease_factor=1.3, review_count=1)

        previous = state.interval_days
        for _ in range(8):
            state = scheduler.review(state, True, TODAY)
            assert state.interval_days > previous
            previous = state.interval_days

    def test_ease_clamped_at_maximum(self, scheduler) -> None:
        state = ReviewState(interval_days=10, ease_factor=2.95, review_count=4)

        state = scheduler.review(state, True, TODAY)

        assert state.ease_factor == 3.0

    def test_interval_never_exceeds_cap(self, scheduler) -> None:
        """No sequence of outcomes pushes the interval beyond the cap."""
        state = scheduler.new_state()
        for succeeded in [True] * 15 + [False] + [True] * 15:
            state = scheduler.review(state, succeeded, TODAY)
            assert 1 <= state.interval_days <= 180

    def test_custom_cap(self) -> None:
        scheduler = SM2Scheduler(max_interval=7)
        state = ReviewState(interval_days=5, ease_factor=2.5, review_count=3)

        state = scheduler.review(state, True, TODAY)

        assert state.interval_days == 7
        assert state.next_review_date == TODAY + timedelta(days=7)


class TestFailure:
    """Tests for failed reviews."""

    def test_failure_resets_schedule(self, scheduler) -> None:
        """Failure on (10 days, ease 2.7) resets to 1 day, ease 2.5, count 0."""
        state = ReviewState(interval_days=10, ease_factor=2.7, review_count=4)

        state = scheduler.review(state, False, TODAY)

        assert state.interval_days == 1
        assert state.ease_factor == 2.5
        assert state.review_count == 0
        assert state.next_review_date == TODAY + timedelta(days=1)
        assert state.last_outcome is False

    @pytest.mark.parametrize("interval", [1, 2, 30, 180])
    def test_failure_interval_always_one(self, scheduler, interval) -> None:
        state = ReviewState(interval_days=interval, ease_factor=2.5, review_count=3)

        assert scheduler.review(state, False, TODAY).interval_days == 1

    def test_ease_clamped_at_minimum(self, scheduler) -> None:
        state = ReviewState(interval_days=3, ease_factor=1.4, review_count=2)

        for _ in range(3):
            state = scheduler.review(state, False, TODAY)

        assert state.ease_factor == 1.3

    def test_review_does_not_mutate_input(self, scheduler) -> None:
        state = ReviewState(interval_days=10, ease_factor=2.7, review_count=4)

        scheduler.review(state, False, TODAY)

        assert state.interval_days == 10
        assert state.ease_factor == 2.7


class TestRounding:
    """Tests for interval rounding."""

    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (3.5, 4), (8.4, 8), (8.6, 9), (1.0, 1)],
    )
    def test_round_half_up(self, value, expected) -> None:
        """Halves round up, unlike Python's banker's rounding."""
        assert round_half_up(value) == expected


class TestUtcToday:
    """The scheduling day is the UTC calendar day."""

    def test_late_evening_in_paris_is_still_the_utc_day(self) -> None:
        # 23:30 UTC on 1 March is already 2 March in Paris
        fixed_now = datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc)

        with patch("reved.services.learning.sm2.datetime") as mock_datetime:
            mock_datetime.now.return_value = fixed_now

            assert utc_today() == date(2024, 3, 1)
            mock_datetime.now.assert_called_once_with(timezone.utc)

    def test_review_defaults_to_utc_day(self, scheduler) -> None:
        with patch("reved.services.learning.sm2.utc_today", return_value=TODAY):
            state = scheduler.review(scheduler.new_state(), succeeded=True)

        assert state.next_review_date == TODAY + timedelta(days=1)
