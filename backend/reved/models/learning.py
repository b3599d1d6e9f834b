"""
Learning Core API Models (Pydantic)

Request/response schemas for:
- Attempt submission
- Recommendations
- Progress listing
- Revision schedules
- Student profile

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: reved/db/models.py

    Data flows: API Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Field aliases carry the wire names used by the frontend; responses are
    serialized by alias.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field

from reved.enums.api import RecommendationRefresh
from reved.enums.learning import ProgressStatus
from reved.models.base import StrictRequest, StrictResponse


# ===========================================
# Attempt Models
# ===========================================


class AttemptPayload(StrictRequest):
    """
    One answer to one exercise.

    `succeeded` is decided by the client-side exercise engine; the server
    records it as given.
    """

    answer: Any = Field(..., alias="reponse", description="Answer given (any JSON)")
    succeeded: bool = Field(..., alias="reussi")
    duration_seconds: int = Field(
        ..., alias="tempsSecondes", ge=1, le=3600, description="Time spent"
    )
    hints_used: int = Field(0, alias="aidesUtilisees", ge=0)


class AttemptSubmitRequest(StrictRequest):
    """Request body for POST /api/students/{id}/attempts."""

    exercise_id: int = Field(..., alias="exerciseId", gt=0)
    attempt: AttemptPayload


class AttemptResult(StrictResponse):
    """Outcome of a recorded attempt."""

    succeeded: bool = Field(..., alias="reussi")
    points_awarded: int = Field(..., alias="pointsGagnes")
    total_points: int = Field(..., alias="totalPoints")
    current_level: int = Field(1, alias="niveauJoueur")
    new_status: ProgressStatus = Field(..., alias="statut")
    recommendations: RecommendationRefresh


# ===========================================
# Recommendation Models
# ===========================================


class ExerciseSummary(StrictResponse):
    """Exercise as returned by the recommendation engine."""

    id: int
    title: str = Field(..., alias="titre")
    instructions: Optional[str] = Field(None, alias="consigne")
    exercise_type: str = Field(..., alias="type")
    difficulty: str = Field(..., alias="difficulte")
    points_on_success: int = Field(..., alias="pointsReussite")
    estimated_seconds: int = Field(..., alias="dureeEstimee")
    order: int = Field(0, alias="ordre")
    module_id: int = Field(..., alias="moduleId")
    module_title: str = Field(..., alias="moduleTitle")
    subject: str = Field(..., alias="moduleMatiere")
    grade_level: str = Field(..., alias="moduleNiveau")


# ===========================================
# Progress Models
# ===========================================


class ProgressRow(StrictResponse):
    """Progress record joined with exercise and module metadata."""

    id: int
    exercise_id: int = Field(..., alias="exerciseId")
    status: ProgressStatus = Field(..., alias="statut")
    attempt_count: int = Field(..., alias="nombreTentatives")
    success_count: int = Field(..., alias="nombreReussites")
    success_rate: float = Field(..., alias="tauxReussite", ge=0.0, le=1.0)
    points_earned: int = Field(..., alias="pointsGagnes")
    needs_remediation: bool = Field(False, alias="remediation")
    last_attempt_at: Optional[datetime] = Field(None, alias="derniereTentative")
    first_success_at: Optional[datetime] = Field(None, alias="premiereReussite")
    exercise_title: str = Field(..., alias="exerciseTitle")
    exercise_type: str = Field(..., alias="exerciseType")
    exercise_difficulty: str = Field(..., alias="exerciseDifficulty")
    module_title: str = Field(..., alias="moduleTitle")
    subject: str = Field(..., alias="moduleMatiere")


# ===========================================
# Revision Models
# ===========================================


class RevisionScheduleResponse(StrictResponse):
    """SM-2 revision state of one exercise."""

    exercise_id: int = Field(..., alias="exerciseId")
    next_review_date: date = Field(..., alias="prochaineRevision")
    interval_days: int = Field(..., alias="intervalleJours", ge=1)
    ease_factor: float = Field(..., alias="facteurFacilite")
    review_count: int = Field(..., alias="nombreRevisions", ge=0)
    last_outcome: bool = Field(..., alias="dernierResultat")


class RevisionStats(StrictResponse):
    """
    Revision workload of a student.

    `due` counts schedules whose next review date has arrived; `upcoming`
    counts the rest.
    """

    total: int = 0
    due: int = 0
    upcoming: int = 0


# ===========================================
# Student Models
# ===========================================


class StudentProfile(StrictResponse):
    """Public profile of a student."""

    id: int
    first_name: str = Field(..., alias="prenom")
    last_name: str = Field(..., alias="nom")
    grade_level: str = Field(..., alias="niveauActuel")
    total_points: int = Field(0, alias="totalPoints")
    current_level: int = Field(1, alias="niveauJoueur")
    last_access_at: Optional[datetime] = Field(None, alias="dernierAcces")


class StudentStats(StrictResponse):
    """
    Aggregate over all of a student's progress records.

    `exercises_completed` includes mastered exercises. `average_success_rate`
    is the mean of per-exercise success rates (0.0 with no records).
    """

    total_exercises: int = Field(0, alias="totalExercises")
    exercises_completed: int = Field(0, alias="exercisesCompleted")
    exercises_mastered: int = Field(0, alias="exercisesMastered")
    total_points: int = Field(0, alias="totalPoints")
    average_success_rate: float = Field(0.0, alias="averageSuccessRate")
    last_activity: Optional[datetime] = Field(None, alias="lastActivity")
