"""
Students API Router

Endpoints for a pupil's learning data. Every endpoint requires a session
whose student matches the path id.

Endpoints:
- GET /api/students/{id} - Student profile (stamps last access)
- POST /api/students/{id}/attempts - Submit an exercise attempt
- GET /api/students/{id}/recommendations - Ranked next exercises
- GET /api/students/{id}/progress - Progress records
- GET /api/students/{id}/stats - Progress statistics
- GET /api/students/{id}/revisions/due - Revisions due today
- GET /api/students/{id}/revisions/stats - Revision counts
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reved.config import settings
from reved.db.base import get_db
from reved.db.redis import recommendation_cache
from reved.dependencies import authorize_student
from reved.enums import GradeLevel, RateLimitType
from reved.middleware.rate_limit import get_rate_limit, limiter
from reved.models.base import Envelope
from reved.models.learning import (
    AttemptResult,
    AttemptSubmitRequest,
    ExerciseSummary,
    ProgressRow,
    RevisionScheduleResponse,
    RevisionStats,
    StudentProfile,
    StudentStats,
)
from reved.services.learning import (
    AttemptService,
    ProgressService,
    RecommendationService,
    RevisionScheduler,
)
from reved.services.learning.sm2 import utc_today

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/students", tags=["students"])


# ===========================================
# Dependency Injection
# ===========================================


async def get_revision_scheduler(
    db: AsyncSession = Depends(get_db),
) -> RevisionScheduler:
    """Get revision scheduler."""
    return RevisionScheduler(db)


async def get_attempt_service(
    db: AsyncSession = Depends(get_db),
    scheduler: RevisionScheduler = Depends(get_revision_scheduler),
) -> AttemptService:
    """Get attempt service."""
    return AttemptService(db, scheduler, recommendation_cache)


async def get_recommendation_service(
    db: AsyncSession = Depends(get_db),
) -> RecommendationService:
    """Get recommendation service."""
    return RecommendationService(db, recommendation_cache)


async def get_progress_service(
    db: AsyncSession = Depends(get_db),
) -> ProgressService:
    """Get progress service."""
    return ProgressService(db)


# ===========================================
# Student Endpoints
# ===========================================


@router.get("/{student_id}", response_model=Envelope[StudentProfile])
async def get_student(
    student_id: int = Depends(authorize_student),
    service: ProgressService = Depends(get_progress_service),
) -> Envelope[StudentProfile]:
    """Get the student's profile and record the access."""
    profile = await service.get_student(student_id, touch=True)
    return Envelope(data=profile, message="Student loaded")


@router.post("/{student_id}/attempts", response_model=Envelope[AttemptResult])
@limiter.limit(get_rate_limit(RateLimitType.ATTEMPTS))
async def submit_attempt(
    request: Request,
    body: AttemptSubmitRequest,
    student_id: int = Depends(authorize_student),
    service: AttemptService = Depends(get_attempt_service),
) -> Envelope[AttemptResult]:
    """
    Submit an exercise attempt.

    Updates progress, points and the revision schedule, and invalidates
    cached recommendations.
    """
    result = await service.submit_attempt(student_id, body.exercise_id, body.attempt)
    message = "Exercise succeeded" if result.succeeded else "Attempt recorded"
    return Envelope(data=result, message=message)


@router.get(
    "/{student_id}/recommendations",
    response_model=Envelope[list[ExerciseSummary]],
)
@limiter.limit(get_rate_limit(RateLimitType.RECOMMENDATIONS))
async def get_recommendations(
    request: Request,
    limit: int = Query(
        settings.RECOMMENDATION_DEFAULT_LIMIT,
        ge=1,
        le=settings.RECOMMENDATION_MAX_LIMIT,
        description="Maximum exercises to return",
    ),
    grade_level: Optional[GradeLevel] = Query(
        None, alias="niveau", description="Grade level filter"
    ),
    subject: Optional[str] = Query(None, alias="matiere", description="Subject filter"),
    student_id: int = Depends(authorize_student),
    service: RecommendationService = Depends(get_recommendation_service),
) -> Envelope[list[ExerciseSummary]]:
    """
    Get recommended exercises, best first.

    Grade level defaults to the student's own grade.
    """
    exercises = await service.get_recommendations(
        student_id,
        limit=limit,
        grade_level=grade_level.value if grade_level else None,
        subject=subject,
    )
    return Envelope(data=exercises, message=f"{len(exercises)} exercises recommended")


@router.get("/{student_id}/progress", response_model=Envelope[list[ProgressRow]])
async def get_progress(
    subject: Optional[str] = Query(None, alias="matiere", description="Subject filter"),
    limit: int = Query(
        settings.PROGRESS_DEFAULT_LIMIT,
        ge=1,
        le=settings.PROGRESS_MAX_LIMIT,
        description="Maximum records to return",
    ),
    student_id: int = Depends(authorize_student),
    service: ProgressService = Depends(get_progress_service),
) -> Envelope[list[ProgressRow]]:
    """Get progress records, most recently attempted first."""
    rows = await service.list_progress(student_id, subject=subject, limit=limit)
    return Envelope(data=rows, message="Progress loaded")


@router.get("/{student_id}/stats", response_model=Envelope[StudentStats])
async def get_student_stats(
    student_id: int = Depends(authorize_student),
    service: ProgressService = Depends(get_progress_service),
) -> Envelope[StudentStats]:
    """Get totals over the student's progress records."""
    stats = await service.get_student_stats(student_id)
    return Envelope(data=stats, message="Statistics loaded")


# ===========================================
# Revision Endpoints
# ===========================================


@router.get(
    "/{student_id}/revisions/due",
    response_model=Envelope[list[RevisionScheduleResponse]],
)
async def get_due_revisions(
    student_id: int = Depends(authorize_student),
    scheduler: RevisionScheduler = Depends(get_revision_scheduler),
) -> Envelope[list[RevisionScheduleResponse]]:
    """Get revisions due today, most overdue first."""
    revisions = await scheduler.get_due_revisions(student_id, utc_today())
    return Envelope(data=revisions, message=f"{len(revisions)} revisions due")


@router.get("/{student_id}/revisions/stats", response_model=Envelope[RevisionStats])
async def get_revision_stats(
    student_id: int = Depends(authorize_student),
    scheduler: RevisionScheduler = Depends(get_revision_scheduler),
) -> Envelope[RevisionStats]:
    """Get revision counts (total, due today, upcoming)."""
    stats = await scheduler.get_revision_stats(student_id, utc_today())
    return Envelope(data=stats, message="Revision statistics loaded")
