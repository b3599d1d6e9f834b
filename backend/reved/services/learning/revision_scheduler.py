"""
Revision Scheduler Service

Service layer that integrates SM-2 scheduling with the database.
Handles schedule creation and updates after attempts, due-revision queries,
and revision statistics.

Usage:
    from reved.services.learning import RevisionScheduler

    scheduler = RevisionScheduler(db_session)

    # After an attempt
    schedule = await scheduler.record_outcome(student_id, exercise_id, succeeded=True)

    # What should be revised today
    exercise_ids = await scheduler.get_due_items(student_id, utc_today())
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reved.db.models import RevisionSchedule
from reved.models.learning import RevisionScheduleResponse, RevisionStats
from reved.services.learning.sm2 import (
    ReviewState,
    SM2Scheduler,
    create_scheduler,
    utc_today,
)

logger = logging.getLogger(__name__)


class RevisionScheduler:
    """
    Service for managing exercise revision schedules with SM-2.

    Provides:
    - Schedule updates from attempt outcomes
    - Due revision queries (most overdue first)
    - Revision statistics
    """

    def __init__(self, db: AsyncSession, algorithm: Optional[SM2Scheduler] = None):
        """
        Initialize the revision scheduler.

        Args:
            db: Async database session
            algorithm: SM-2 scheduler (defaults to one built from settings)
        """
        self.db = db
        self.algorithm = algorithm or create_scheduler()

    async def _get_schedule(
        self, student_id: int, exercise_id: int
    ) -> Optional[RevisionSchedule]:
        result = await self.db.execute(
            select(RevisionSchedule)
            .where(
                and_(
                    RevisionSchedule.student_id == student_id,
                    RevisionSchedule.exercise_id == exercise_id,
                )
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def record_outcome(
        self,
        student_id: int,
        exercise_id: int,
        succeeded: bool,
        today: Optional[date] = None,
    ) -> Optional[RevisionSchedule]:
        """
        Update (or create) the revision schedule after an attempt.

        A success always leaves the pair scheduled. A failure only updates
        an existing schedule: exercises that were never passed are not put
        into revision.

        Args:
            student_id: Student who made the attempt
            exercise_id: Exercise attempted
            succeeded: Attempt outcome
            today: Day of the attempt (defaults to the UTC day)

        Returns:
            The persisted schedule, or None when a failure hit an
            unscheduled exercise.
        """
        today = today or utc_today()
        schedule = await self._get_schedule(student_id, exercise_id)

        if schedule is None:
            if not succeeded:
                logger.debug(
                    f"No schedule for student {student_id}, exercise {exercise_id}; "
                    "failure not scheduled"
                )
                return None
            state = self.algorithm.new_state()
            schedule = RevisionSchedule(student_id=student_id, exercise_id=exercise_id)
            self.db.add(schedule)
        else:
            state = ReviewState(
                interval_days=schedule.interval_days,
                ease_factor=schedule.ease_factor,
                review_count=schedule.review_count,
                next_review_date=schedule.next_review_date,
                last_outcome=schedule.last_outcome,
            )

        new_state = self.algorithm.review(state, succeeded, today)

        schedule.interval_days = new_state.interval_days
        schedule.ease_factor = new_state.ease_factor
        schedule.review_count = new_state.review_count
        schedule.next_review_date = new_state.next_review_date
        schedule.last_outcome = succeeded

        await self.db.commit()
        await self.db.refresh(schedule)

        logger.info(
            f"Revision scheduled for student {student_id}, exercise {exercise_id}: "
            f"next={schedule.next_review_date} interval={schedule.interval_days}d "
            f"ease={schedule.ease_factor}"
        )
        return schedule

    def _due_query(self, student_id: int, as_of: date):
        return (
            select(RevisionSchedule)
            .where(
                and_(
                    RevisionSchedule.student_id == student_id,
                    RevisionSchedule.next_review_date <= as_of,
                )
            )
            .order_by(
                RevisionSchedule.next_review_date.asc(),
                RevisionSchedule.ease_factor.asc(),
            )
        )

    async def get_due_items(self, student_id: int, as_of: date) -> list[int]:
        """
        Get the exercises a student should revise.

        Ordered most overdue first, then weakest (lowest ease) first.

        Args:
            student_id: Student ID
            as_of: Reference day; schedules due on or before it are returned

        Returns:
            Exercise IDs
        """
        result = await self.db.execute(self._due_query(student_id, as_of))
        return [schedule.exercise_id for schedule in result.scalars().all()]

    async def get_due_revisions(
        self, student_id: int, as_of: date
    ) -> list[RevisionScheduleResponse]:
        """Same selection and order as get_due_items, with full schedule data."""
        result = await self.db.execute(self._due_query(student_id, as_of))
        return [self._to_response(s) for s in result.scalars().all()]

    async def get_revision_stats(self, student_id: int, as_of: date) -> RevisionStats:
        """
        Count a student's schedules.

        Returns:
            RevisionStats with total, due (on or before as_of) and upcoming.
        """
        total_result = await self.db.execute(
            select(func.count(RevisionSchedule.id)).where(
                RevisionSchedule.student_id == student_id
            )
        )
        total = total_result.scalar() or 0

        due_result = await self.db.execute(
            select(func.count(RevisionSchedule.id)).where(
                and_(
                    RevisionSchedule.student_id == student_id,
                    RevisionSchedule.next_review_date <= as_of,
                )
            )
        )
        due = due_result.scalar() or 0

        return RevisionStats(total=total, due=due, upcoming=total - due)

    def _to_response(self, schedule: RevisionSchedule) -> RevisionScheduleResponse:
        return RevisionScheduleResponse(
            exercise_id=schedule.exercise_id,
            next_review_date=schedule.next_review_date,
            interval_days=schedule.interval_days,
            ease_factor=schedule.ease_factor,
            review_count=schedule.review_count,
            last_outcome=schedule.last_outcome,
        )
