"""Pydantic API models."""

from reved.models.base import Envelope, StrictRequest, StrictResponse
from reved.models.learning import (
    AttemptPayload,
    AttemptResult,
    AttemptSubmitRequest,
    ExerciseSummary,
    ProgressRow,
    RevisionScheduleResponse,
    RevisionStats,
    StudentProfile,
    StudentStats,
)

__all__ = [
    "Envelope",
    "StrictRequest",
    "StrictResponse",
    "AttemptPayload",
    "AttemptResult",
    "AttemptSubmitRequest",
    "ExerciseSummary",
    "ProgressRow",
    "RevisionScheduleResponse",
    "RevisionStats",
    "StudentProfile",
    "StudentStats",
]
