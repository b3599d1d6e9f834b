"""
Learning System Enums

Defines enums for progress tracking, curriculum classification and
recommendation inputs.
"""

from enum import Enum


class ProgressStatus(str, Enum):
    """
    Status of a (student, exercise) progress record.

    State transitions are driven by attempt submission:
    - NOT_STARTED → IN_PROGRESS (failed attempt) or COMPLETED (success)
    - COMPLETED → MASTERED (≥3 successes with ≥80% success rate)
    - any → IN_PROGRESS (failed attempt)

    NOT_STARTED is never persisted by attempt submission: records are created
    lazily on the first attempt. It exists for clients listing exercises.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MASTERED = "mastered"


class DifficultyTier(str, Enum):
    """
    Curriculum difficulty tier of an exercise.

    Distinct from ProgressStatus: the tier describes the exercise, the status
    describes one student's record on it.
    """

    DISCOVERY = "discovery"  # Foundational, first exposure
    CONSOLIDATION = "consolidation"  # Practice of a known notion
    MASTERY = "mastery"  # Autonomous application


class GradeLevel(str, Enum):
    """French primary-school grade levels (cycle 2 and 3)."""

    CP = "CP"
    CE1 = "CE1"
    CE2 = "CE2"
    CM1 = "CM1"
    CM2 = "CM2"
