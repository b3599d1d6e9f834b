"""
Centralized enum definitions for the application.

All enums are organized by domain:
- learning.py: Progress statuses, difficulty tiers, grade levels
- api.py: Rate limit categories, recommendation refresh hints

Usage:
    from reved.enums import ProgressStatus, DifficultyTier

    # Or import from specific module
    from reved.enums.learning import GradeLevel
"""

from reved.enums.learning import (
    ProgressStatus,
    DifficultyTier,
    GradeLevel,
)
from reved.enums.api import (
    RateLimitType,
    RecommendationRefresh,
)

__all__ = [
    # Learning
    "ProgressStatus",
    "DifficultyTier",
    "GradeLevel",
    # API
    "RateLimitType",
    "RecommendationRefresh",
]
