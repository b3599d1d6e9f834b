"""
Attempt Service

Records exercise attempts and keeps everything derived from them in sync:

    attempt → progress record → student points/level → revision schedule
            → recommendation cache invalidation

The progress and points update is one database transaction. Rescheduling
and cache invalidation run after the commit and are best effort: a failure
there is logged and never fails the attempt.

Usage:
    from reved.services.learning import AttemptService, RevisionScheduler

    service = AttemptService(db, RevisionScheduler(db), recommendation_cache)
    result = await service.submit_attempt(student_id, exercise_id, payload)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reved.config.settings import settings
from reved.db.models import Exercise, ProgressRecord, Student
from reved.db.redis import RedisCache
from reved.enums.api import RecommendationRefresh
from reved.enums.learning import ProgressStatus
from reved.middleware.error_handling import (
    ExerciseNotFound,
    PersistenceError,
    StudentNotFound,
)
from reved.models.learning import AttemptPayload, AttemptResult
from reved.services.learning.revision_scheduler import RevisionScheduler

logger = logging.getLogger(__name__)


def compute_success_rate(success_count: int, attempt_count: int) -> float:
    """Success rate as a fraction rounded to 2 decimals (0.0 with no attempts)."""
    if attempt_count == 0:
        return 0.0
    return round(success_count / attempt_count, 2)


def compute_status(
    succeeded: bool,
    attempt_count: int,
    success_count: int,
    success_rate: float,
) -> tuple[ProgressStatus, bool]:
    """
    Derive the progress status after an attempt.

    Rules are evaluated in order, the first match wins:
        1. success with enough successes at a high rate → MASTERED
        2. success → COMPLETED
        3. many attempts at a low rate → IN_PROGRESS, flagged for remediation
        4. otherwise → IN_PROGRESS

    Returns:
        (status, needs_remediation)
    """
    if (
        succeeded
        and success_count >= settings.MASTERY_MIN_SUCCESSES
        and success_rate >= settings.MASTERY_MIN_RATE
    ):
        return ProgressStatus.MASTERED, False
    if succeeded:
        return ProgressStatus.COMPLETED, False
    if (
        attempt_count >= settings.REMEDIATION_MIN_ATTEMPTS
        and success_rate < settings.REMEDIATION_MAX_RATE
    ):
        return ProgressStatus.IN_PROGRESS, True
    return ProgressStatus.IN_PROGRESS, False


def compute_level(total_points: int) -> int:
    """Gamification level: one level per LEVEL_POINTS_STEP points, starting at 1."""
    return 1 + total_points // settings.LEVEL_POINTS_STEP


class AttemptService:
    """
    Service for recording exercise attempts.

    Provides:
    - Student and exercise validation
    - Progress record creation and update (counters, rate, status, history)
    - Point and level accounting
    - Post-commit rescheduling and recommendation cache invalidation
    """

    def __init__(
        self,
        db: AsyncSession,
        scheduler: RevisionScheduler,
        cache: RedisCache,
    ):
        """
        Initialize the attempt service.

        Args:
            db: Async database session
            scheduler: Revision scheduler sharing the same session
            cache: Recommendation cache to invalidate after an attempt
        """
        self.db = db
        self.scheduler = scheduler
        self.cache = cache

    async def submit_attempt(
        self,
        student_id: int,
        exercise_id: int,
        attempt: AttemptPayload,
        now: Optional[datetime] = None,
    ) -> AttemptResult:
        """
        Record one attempt by a student on an exercise.

        Args:
            student_id: Student making the attempt
            exercise_id: Exercise attempted
            attempt: Validated attempt payload
            now: Attempt timestamp (defaults to current UTC time)

        Returns:
            AttemptResult with awarded points, new totals and status

        Raises:
            StudentNotFound: Unknown student
            ExerciseNotFound: Unknown or inactive exercise
            PersistenceError: The transaction could not be committed
        """
        now = now or datetime.now(timezone.utc)

        try:
            student = await self._get_student(student_id)
            exercise = await self._get_active_exercise(exercise_id)

            progress = await self._get_or_create_progress(student_id, exercise_id)
            points_awarded = exercise.points_on_success if attempt.succeeded else 0
            self._apply_attempt(progress, attempt, points_awarded, now)

            student.total_points = (student.total_points or 0) + points_awarded
            student.current_level = compute_level(student.total_points)

            new_status = ProgressStatus(progress.status)
            total_points = student.total_points
            current_level = student.current_level

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to record attempt for student {student_id}, "
                f"exercise {exercise_id}: {e}"
            )
            raise PersistenceError(
                "Attempt could not be recorded",
                details={"student_id": student_id, "exercise_id": exercise_id},
            ) from e

        logger.info(
            f"Attempt recorded: student={student_id} exercise={exercise_id} "
            f"succeeded={attempt.succeeded} points={points_awarded} "
            f"status={new_status.value}"
        )

        await self._reschedule(student_id, exercise_id, attempt.succeeded, now)
        await self._invalidate_recommendations(student_id)

        return AttemptResult(
            succeeded=attempt.succeeded,
            points_awarded=points_awarded,
            total_points=total_points,
            current_level=current_level,
            new_status=new_status,
            recommendations=(
                RecommendationRefresh.REFRESH_SCHEDULED
                if attempt.succeeded
                else RecommendationRefresh.UNCHANGED
            ),
        )

    # ===========================================
    # Transaction steps
    # ===========================================

    async def _get_student(self, student_id: int) -> Student:
        result = await self.db.execute(
            select(Student).where(Student.id == student_id).with_for_update()
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise StudentNotFound(f"Student {student_id} not found")
        return student

    async def _get_active_exercise(self, exercise_id: int) -> Exercise:
        result = await self.db.execute(
            select(Exercise).where(
                and_(Exercise.id == exercise_id, Exercise.is_active.is_(True))
            )
        )
        exercise = result.scalar_one_or_none()
        if exercise is None:
            raise ExerciseNotFound(f"Exercise {exercise_id} not found or inactive")
        return exercise

    async def _get_or_create_progress(
        self, student_id: int, exercise_id: int
    ) -> ProgressRecord:
        """Lock the progress row for this pair, creating it on first attempt."""
        result = await self.db.execute(
            select(ProgressRecord)
            .where(
                and_(
                    ProgressRecord.student_id == student_id,
                    ProgressRecord.exercise_id == exercise_id,
                )
            )
            .with_for_update()
        )
        progress = result.scalar_one_or_none()
        if progress is None:
            progress = ProgressRecord(
                student_id=student_id,
                exercise_id=exercise_id,
                status=ProgressStatus.NOT_STARTED.value,
                attempt_count=0,
                success_count=0,
                success_rate=0.0,
                points_earned=0,
                needs_remediation=False,
                history=[],
            )
            self.db.add(progress)
        return progress

    def _apply_attempt(
        self,
        progress: ProgressRecord,
        attempt: AttemptPayload,
        points_awarded: int,
        now: datetime,
    ) -> None:
        entry = {
            "date": now.isoformat(),
            "succeeded": attempt.succeeded,
            "duration_seconds": attempt.duration_seconds,
            "hints_used": attempt.hints_used,
            "points_awarded": points_awarded,
            "answer": attempt.answer,
        }
        # Reassign so the JSON column change is tracked
        progress.history = [*(progress.history or []), entry]

        progress.attempt_count += 1
        if attempt.succeeded:
            progress.success_count += 1
        progress.success_rate = compute_success_rate(
            progress.success_count, progress.attempt_count
        )
        progress.points_earned += points_awarded
        progress.last_attempt_at = now

        status, needs_remediation = compute_status(
            attempt.succeeded,
            progress.attempt_count,
            progress.success_count,
            progress.success_rate,
        )
        progress.status = status.value
        progress.needs_remediation = needs_remediation

        if attempt.succeeded and progress.first_success_at is None:
            progress.first_success_at = now

    # ===========================================
    # Best-effort follow-ups
    # ===========================================

    async def _reschedule(
        self, student_id: int, exercise_id: int, succeeded: bool, now: datetime
    ) -> None:
        try:
            await self.scheduler.record_outcome(
                student_id, exercise_id, succeeded, today=now.date()
            )
        except Exception as e:
            logger.warning(
                f"Revision scheduling failed for student {student_id}, "
                f"exercise {exercise_id}: {e}"
            )
            await self.db.rollback()

    async def _invalidate_recommendations(self, student_id: int) -> None:
        try:
            cleared = await self.cache.clear_pattern(f"{student_id}:*")
            logger.debug(f"Cleared {cleared} cached recommendation lists for student {student_id}")
        except Exception as e:
            logger.warning(
                f"Recommendation cache invalidation failed for student {student_id}: {e}"
            )
