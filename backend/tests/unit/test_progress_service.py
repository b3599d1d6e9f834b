"""
Unit Tests for the Progress Service

Tests student profile lookup, progress listing and progress statistics on an
in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from reved.db.models import ProgressRecord
from reved.enums.learning import ProgressStatus
from reved.middleware.error_handling import StudentNotFound
from reved.services.learning.progress_service import ProgressService

NOW = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


async def _add_progress(
    db,
    exercise_id,
    last_attempt_at,
    student_id=1,
    status=ProgressStatus.IN_PROGRESS,
    success_rate=0.5,
    points_earned=10,
):
    db.add(
        ProgressRecord(
            student_id=student_id,
            exercise_id=exercise_id,
            status=status.value,
            attempt_count=2,
            success_count=1,
            success_rate=success_rate,
            points_earned=points_earned,
            needs_remediation=False,
            last_attempt_at=last_attempt_at,
            history=[],
        )
    )
    await db.commit()


class TestGetStudent:
    """Tests for ProgressService.get_student."""

    @pytest.mark.asyncio
    async def test_get_student(self, db_session, curriculum) -> None:
        profile = await ProgressService(db_session).get_student(1)

        assert profile.id == 1
        assert profile.first_name == "Emma"
        assert profile.grade_level == "CE1"
        assert profile.total_points == 0
        assert profile.last_access_at is None

    @pytest.mark.asyncio
    async def test_touch_stamps_last_access(self, db_session, curriculum) -> None:
        profile = await ProgressService(db_session).get_student(1, touch=True)

        assert profile.last_access_at is not None
        assert curriculum.emma.last_access_at is not None

    @pytest.mark.asyncio
    async def test_unknown_student(self, db_session, curriculum) -> None:
        with pytest.raises(StudentNotFound):
            await ProgressService(db_session).get_student(999)


class TestListProgress:
    """Tests for ProgressService.list_progress."""

    @pytest.mark.asyncio
    async def test_most_recent_first(self, db_session, curriculum) -> None:
        await _add_progress(db_session, 1, NOW - timedelta(days=2))
        await _add_progress(db_session, 5, NOW)
        await _add_progress(db_session, 2, NOW - timedelta(days=1))

        rows = await ProgressService(db_session).list_progress(1)

        assert [row.exercise_id for row in rows] == [5, 2, 1]
        assert rows[0].module_title == "Lecture"
        assert rows[0].subject == "FR"
        assert rows[0].exercise_title == "Exercise 5"

    @pytest.mark.asyncio
    async def test_subject_filter(self, db_session, curriculum) -> None:
        await _add_progress(db_session, 1, NOW)
        await _add_progress(db_session, 5, NOW)

        rows = await ProgressService(db_session).list_progress(1, subject="MA")

        assert [row.exercise_id for row in rows] == [1]

    @pytest.mark.asyncio
    async def test_limit(self, db_session, curriculum) -> None:
        for exercise_id in (1, 2, 3, 5):
            await _add_progress(db_session, exercise_id, NOW)

        rows = await ProgressService(db_session).list_progress(1, limit=2)

        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_only_own_records(self, db_session, curriculum) -> None:
        await _add_progress(db_session, 7, NOW, student_id=2)

        assert await ProgressService(db_session).list_progress(1) == []


class TestGetStudentStats:
    """Tests for ProgressService.get_student_stats."""

    @pytest.mark.asyncio
    async def test_aggregates_progress_records(self, db_session, curriculum) -> None:
        await _add_progress(
            db_session, 1, NOW - timedelta(days=2),
            status=ProgressStatus.MASTERED, success_rate=1.0, points_earned=30,
        )
        await _add_progress(
            db_session, 2, NOW,
            status=ProgressStatus.COMPLETED, success_rate=0.75, points_earned=15,
        )
        await _add_progress(
            db_session, 5, NOW - timedelta(days=1),
            status=ProgressStatus.IN_PROGRESS, success_rate=0.0, points_earned=0,
        )

        stats = await ProgressService(db_session).get_student_stats(1)

        assert stats.total_exercises == 3
        assert stats.exercises_completed == 2
        assert stats.exercises_mastered == 1
        assert stats.total_points == 45
        assert stats.average_success_rate == pytest.approx(0.58)
        assert stats.last_activity == NOW

    @pytest.mark.asyncio
    async def test_no_records(self, db_session, curriculum) -> None:
        stats = await ProgressService(db_session).get_student_stats(1)

        assert stats.total_exercises == 0
        assert stats.exercises_completed == 0
        assert stats.total_points == 0
        assert stats.average_success_rate == 0.0
        assert stats.last_activity is None

    @pytest.mark.asyncio
    async def test_ignores_other_students(self, db_session, curriculum) -> None:
        await _add_progress(db_session, 7, NOW, student_id=2, points_earned=50)

        stats = await ProgressService(db_session).get_student_stats(1)

        assert stats.total_exercises == 0
        assert stats.total_points == 0

    @pytest.mark.asyncio
    async def test_unknown_student(self, db_session, curriculum) -> None:
        with pytest.raises(StudentNotFound):
            await ProgressService(db_session).get_student_stats(999)
