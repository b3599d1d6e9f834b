"""
Learning Core Services

- sm2: Pure SM-2 scheduling math
- RevisionScheduler: Persists revision schedules, due queries and stats
- AttemptService: Records attempts (progress, points, rescheduling)
- RecommendationService: Ranks next exercises, cached in Redis
- ProgressService: Student profiles and progress listings
"""

from reved.services.learning.attempt_service import AttemptService
from reved.services.learning.progress_service import ProgressService
from reved.services.learning.recommendation_service import RecommendationService
from reved.services.learning.revision_scheduler import RevisionScheduler
from reved.services.learning.sm2 import (
    ReviewState,
    SM2Scheduler,
    create_scheduler,
    utc_today,
)

__all__ = [
    "AttemptService",
    "ProgressService",
    "RecommendationService",
    "RevisionScheduler",
    "ReviewState",
    "SM2Scheduler",
    "create_scheduler",
    "utc_today",
]
