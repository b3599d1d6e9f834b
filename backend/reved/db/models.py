"""
SQLAlchemy Database Models for the Learning Core

Tables:
- students: Pupils with their grade level and point totals
- modules: Curriculum modules grouping exercises by subject and grade
- exercises: Individual curriculum exercises
- progress_records: Per (student, exercise) aggregate of all attempts
- revision_schedules: SM-2 revision state per (student, exercise)

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: reved/models/learning.py

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database

Column types are kept portable (JSON rather than JSONB, no ARRAY) so the
same metadata runs on PostgreSQL in production and SQLite in tests.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reved.db.base import Base, UTCDateTime
from reved.enums.learning import DifficultyTier, ProgressStatus


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# ===========================================
# Students & Curriculum
# ===========================================


class Student(Base):
    """
    A pupil using the application.

    Attributes:
        id: Primary key.
        first_name / last_name: Display names.
        grade_level: Current school grade (CP..CM2). Default filter for
            recommendations.
        total_points: Sum of points awarded across all attempts.
        current_level: Gamification level derived from total_points.
        last_access_at: Last time the profile was read by its owner.
        progress_records: Per-exercise progress rows (deleted with the student).
        revision_schedules: Revision rows (deleted with the student).
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade_level: Mapped[str] = mapped_column(String(20), nullable=False)

    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    last_access_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=_utc_now
    )

    progress_records: Mapped[List["ProgressRecord"]] = relationship(
        back_populates="student", cascade="all, delete-orphan"
    )
    revision_schedules: Mapped[List["RevisionSchedule"]] = relationship(
        back_populates="student", cascade="all, delete-orphan"
    )


class Module(Base):
    """
    Curriculum module: a themed group of exercises for one subject and grade.
    """

    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    subject: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    grade_level: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    exercises: Mapped[List["Exercise"]] = relationship(back_populates="module")


class Exercise(Base):
    """
    A curriculum exercise.

    Attributes:
        difficulty: DifficultyTier value (discovery, consolidation, mastery).
        points_on_success: Points awarded for each successful attempt.
        estimated_seconds: Expected completion time.
        order: Position in the curriculum sequence; lower comes first.
        is_active: Inactive exercises cannot be attempted or recommended.
    """

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(primary_key=True)
    module_id: Mapped[int] = mapped_column(ForeignKey("modules.id"), index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    instructions: Mapped[Optional[str]] = mapped_column(Text)
    exercise_type: Mapped[str] = mapped_column(String(30), nullable=False)
    difficulty: Mapped[str] = mapped_column(
        String(30), nullable=False, default=DifficultyTier.DISCOVERY.value
    )

    points_on_success: Mapped[int] = mapped_column(Integer, default=10)
    estimated_seconds: Mapped[int] = mapped_column(Integer, default=300)
    order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    module: Mapped["Module"] = relationship(back_populates="exercises")


# ===========================================
# Progress & Revisions
# ===========================================


class ProgressRecord(Base):
    """
    Aggregate of every attempt one student made on one exercise.

    Invariants:
        success_count <= attempt_count
        first_success_at is written once and never cleared
        history is append-only

    Attributes:
        status: ProgressStatus value.
        attempt_count / success_count: Attempt counters.
        success_rate: success_count / attempt_count as a fraction, 2 decimals.
        points_earned: Points accumulated on this exercise (never decreases).
        needs_remediation: Set when the student keeps failing (≥5 attempts
            below 50% success); lowers the exercise's recommendation score.
        history: List of attempt snapshots
            {date, succeeded, duration_seconds, hints_used, points_awarded, answer}.
    """

    __tablename__ = "progress_records"
    __table_args__ = (
        UniqueConstraint("student_id", "exercise_id", name="uq_progress_student_exercise"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), index=True
    )
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id"), index=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProgressStatus.NOT_STARTED.value
    )
    attempt_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    success_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    success_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    needs_remediation: Mapped[bool] = mapped_column(Boolean, default=False)

    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    first_success_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)

    history: Mapped[list] = mapped_column(JSON, default=list)

    student: Mapped["Student"] = relationship(back_populates="progress_records")
    exercise: Mapped["Exercise"] = relationship()


class RevisionSchedule(Base):
    """
    SM-2 revision state for one (student, exercise) pair.

    Created on the first successful attempt, then updated after every
    attempt on that exercise.

    Attributes:
        next_review_date: Calendar day the exercise becomes due again.
        interval_days: Current gap between reviews (1..SRS_MAX_INTERVAL_DAYS).
        ease_factor: Interval growth multiplier (SRS_MIN..SRS_MAX_EASE_FACTOR).
        review_count: Consecutive successful reviews; reset to 0 on failure.
        last_outcome: Whether the latest attempt succeeded.
    """

    __tablename__ = "revision_schedules"
    __table_args__ = (
        UniqueConstraint("student_id", "exercise_id", name="uq_revision_student_exercise"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), index=True
    )
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id"), index=True)

    next_review_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    interval_days: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    ease_factor: Mapped[float] = mapped_column(Float, default=2.5, nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_outcome: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=_utc_now, onupdate=_utc_now
    )

    student: Mapped["Student"] = relationship(back_populates="revision_schedules")
