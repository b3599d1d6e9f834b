"""
Progress Service

Read side of the learning core: student profiles, progress listings and
progress statistics.

Usage:
    from reved.services.learning import ProgressService

    service = ProgressService(db)
    profile = await service.get_student(student_id, touch=True)
    rows = await service.list_progress(student_id, subject="MA", limit=50)
    stats = await service.get_student_stats(student_id)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reved.config.settings import settings
from reved.db.models import Exercise, Module, ProgressRecord, Student
from reved.enums.learning import ProgressStatus
from reved.middleware.error_handling import StudentNotFound
from reved.models.learning import ProgressRow, StudentProfile, StudentStats

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for student profiles, progress listings and statistics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_student(self, student_id: int, touch: bool = False) -> StudentProfile:
        """
        Get a student's profile.

        Args:
            student_id: Student ID
            touch: Stamp last_access_at with the current time

        Raises:
            StudentNotFound: Unknown student
        """
        student = await self._require_student(student_id)

        if touch:
            student.last_access_at = datetime.now(timezone.utc)
            await self.db.commit()

        return StudentProfile(
            id=student.id,
            first_name=student.first_name,
            last_name=student.last_name,
            grade_level=student.grade_level,
            total_points=student.total_points,
            current_level=student.current_level,
            last_access_at=student.last_access_at,
        )

    async def _require_student(self, student_id: int) -> Student:
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFound(f"Student {student_id} not found")
        return student

    async def list_progress(
        self,
        student_id: int,
        subject: Optional[str] = None,
        limit: int = None,
    ) -> list[ProgressRow]:
        """
        List a student's progress records, most recently attempted first.

        Args:
            student_id: Student ID
            subject: Optional module subject filter
            limit: Maximum rows (defaults to settings.PROGRESS_DEFAULT_LIMIT)
        """
        limit = limit or settings.PROGRESS_DEFAULT_LIMIT

        conditions = [ProgressRecord.student_id == student_id]
        if subject:
            conditions.append(Module.subject == subject)

        result = await self.db.execute(
            select(ProgressRecord, Exercise, Module)
            .join(Exercise, ProgressRecord.exercise_id == Exercise.id)
            .join(Module, Exercise.module_id == Module.id)
            .where(and_(*conditions))
            .order_by(ProgressRecord.last_attempt_at.desc(), ProgressRecord.id.desc())
            .limit(limit)
        )

        return [
            ProgressRow(
                id=progress.id,
                exercise_id=progress.exercise_id,
                status=ProgressStatus(progress.status),
                attempt_count=progress.attempt_count,
                success_count=progress.success_count,
                success_rate=progress.success_rate,
                points_earned=progress.points_earned,
                needs_remediation=progress.needs_remediation,
                last_attempt_at=progress.last_attempt_at,
                first_success_at=progress.first_success_at,
                exercise_title=exercise.title,
                exercise_type=exercise.exercise_type,
                exercise_difficulty=exercise.difficulty,
                module_title=module.title,
                subject=module.subject,
            )
            for progress, exercise, module in result.all()
        ]

    async def get_student_stats(self, student_id: int) -> StudentStats:
        """
        Aggregate a student's progress records in one query.

        Raises:
            StudentNotFound: Unknown student
        """
        await self._require_student(student_id)

        finished = (ProgressStatus.COMPLETED.value, ProgressStatus.MASTERED.value)
        result = await self.db.execute(
            select(
                func.count(ProgressRecord.id),
                func.sum(case((ProgressRecord.status.in_(finished), 1), else_=0)),
                func.sum(
                    case((ProgressRecord.status == ProgressStatus.MASTERED.value, 1), else_=0)
                ),
                func.sum(ProgressRecord.points_earned),
                func.avg(ProgressRecord.success_rate),
                func.max(ProgressRecord.last_attempt_at),
            ).where(ProgressRecord.student_id == student_id)
        )
        total, completed, mastered, points, average_rate, last_activity = result.one()

        return StudentStats(
            total_exercises=total or 0,
            exercises_completed=completed or 0,
            exercises_mastered=mastered or 0,
            total_points=points or 0,
            average_success_rate=round(float(average_rate or 0.0), 2),
            last_activity=last_activity,
        )
