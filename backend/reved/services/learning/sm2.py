"""
SM-2 Spaced Repetition Algorithm

Pure scheduling math for exercise revisions, independent of the database.
This is a binary-outcome SM-2 variant: every attempt is either a success
or a failure, there is no graded quality score.

Key Concepts:
- Interval: Days until the exercise should be revised again
- Ease factor: Multiplier applied to the interval after each success
- Review count: Consecutive successful reviews (reset on failure)

Rules:
    success → review_count += 1, ease += bonus
              interval = 1 on the first success, otherwise
              max(interval + 1, round(interval × ease))
    failure → review_count = 0, ease -= penalty, interval = 1

    ease is clamped to [min_ease, max_ease]; interval is capped at
    max_interval; next_review_date = today + interval.

Usage:
    from reved.services.learning.sm2 import create_scheduler

    scheduler = create_scheduler()

    state = scheduler.new_state()
    state = scheduler.review(state, succeeded=True, today=utc_today())
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from reved.config.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class ReviewState:
    """
    SM-2 state for persistence.

    Maps to the scheduling columns of the revision_schedules table.
    """

    interval_days: int = 1
    ease_factor: float = 2.5
    review_count: int = 0
    next_review_date: Optional[date] = None
    last_outcome: Optional[bool] = None


def utc_today() -> date:
    """Current calendar day in UTC, the day attempts are scheduled from."""
    return datetime.now(timezone.utc).date()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 → 3)."""
    return int(math.floor(value + 0.5))


class SM2Scheduler:
    """
    Binary-outcome SM-2 scheduler.

    Attributes:
        initial_ease: Ease factor of a new schedule
        min_ease / max_ease: Ease factor bounds
        ease_bonus: Ease added on success
        ease_penalty: Ease removed on failure
        initial_interval: Interval of a new schedule, and after a failure
        max_interval: Maximum days between reviews
    """

    def __init__(
        self,
        initial_ease: float = 2.5,
        min_ease: float = 1.3,
        max_ease: float = 3.0,
        ease_bonus: float = 0.1,
        ease_penalty: float = 0.2,
        initial_interval: int = 1,
        max_interval: int = 180,
    ):
        self.initial_ease = initial_ease
        self.min_ease = min_ease
        self.max_ease = max_ease
        self.ease_bonus = ease_bonus
        self.ease_penalty = ease_penalty
        self.initial_interval = initial_interval
        self.max_interval = max_interval

    def new_state(self) -> ReviewState:
        """Initial state of an exercise that has never been scheduled."""
        return ReviewState(
            interval_days=self.initial_interval,
            ease_factor=self.initial_ease,
            review_count=0,
        )

    def _clamp_ease(self, ease: float) -> float:
        # Rounded so repeated +0.1/-0.2 steps do not drift
        return round(min(self.max_ease, max(self.min_ease, ease)), 2)

    def review(
        self,
        state: ReviewState,
        succeeded: bool,
        today: Optional[date] = None,
    ) -> ReviewState:
        """
        Apply one attempt outcome and compute the next review date.

        Args:
            state: Current scheduling state (not modified)
            succeeded: Whether the attempt succeeded
            today: Day of the attempt. Defaults to the UTC day.

        Returns:
            New ReviewState with next_review_date set.
        """
        today = today or utc_today()

        if succeeded:
            review_count = state.review_count + 1
            ease = self._clamp_ease(state.ease_factor + self.ease_bonus)
            if review_count == 1:
                interval = self.initial_interval
            else:
                interval = max(
                    state.interval_days + 1,
                    round_half_up(state.interval_days * ease),
                )
        else:
            review_count = 0
            ease = self._clamp_ease(state.ease_factor - self.ease_penalty)
            interval = self.initial_interval

        interval = min(interval, self.max_interval)

        return replace(
            state,
            interval_days=interval,
            ease_factor=ease,
            review_count=review_count,
            next_review_date=today + timedelta(days=interval),
            last_outcome=succeeded,
        )


def create_scheduler(max_interval: Optional[int] = None) -> SM2Scheduler:
    """
    Create an SM-2 scheduler configured from settings.

    Args:
        max_interval: Override for SRS_MAX_INTERVAL_DAYS

    Returns:
        Configured SM2Scheduler instance
    """
    return SM2Scheduler(
        initial_ease=settings.SRS_INITIAL_EASE_FACTOR,
        min_ease=settings.SRS_MIN_EASE_FACTOR,
        max_ease=settings.SRS_MAX_EASE_FACTOR,
        ease_bonus=settings.SRS_EASE_BONUS,
        ease_penalty=settings.SRS_EASE_PENALTY,
        initial_interval=settings.SRS_INITIAL_INTERVAL_DAYS,
        max_interval=max_interval or settings.SRS_MAX_INTERVAL_DAYS,
    )
