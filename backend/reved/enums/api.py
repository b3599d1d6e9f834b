"""
API-related enums.

Defines enums for rate limiting and response-level concerns.
"""

from enum import Enum


class RateLimitType(str, Enum):
    """
    Rate limit categories for different endpoint types.

    Each category has a corresponding rate limit configured in settings.
    Usage:
        from reved.enums import RateLimitType
        from reved.config import settings

        limit = settings.get_rate_limit(RateLimitType.ATTEMPTS)
    """

    # General API endpoints
    DEFAULT = "default"

    # Attempt submission (writes progress, points and schedules)
    ATTEMPTS = "attempts"

    # Recommendation computation (cache misses hit several queries)
    RECOMMENDATIONS = "recommendations"


class RecommendationRefresh(str, Enum):
    """
    Recommendation hint returned after an attempt.

    Tells the client whether its cached recommendation list went stale.
    """

    REFRESH_SCHEDULED = "refresh_scheduled"
    UNCHANGED = "unchanged"
