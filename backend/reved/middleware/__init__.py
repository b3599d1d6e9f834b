"""
Middleware Package

Provides FastAPI middleware for:
- Rate limiting
- Error handling

Rate limiting usage:
    from reved.middleware import limiter, get_rate_limit
    from reved.enums import RateLimitType

    @limiter.limit(get_rate_limit(RateLimitType.ATTEMPTS))
    async def my_endpoint(request: Request):
        ...
"""

from reved.middleware.rate_limit import setup_rate_limiting, limiter, get_rate_limit
from reved.middleware.error_handling import (
    ErrorHandlingMiddleware,
    ExerciseNotFound,
    Forbidden,
    InvalidInput,
    InvalidStudentId,
    PersistenceError,
    RecommendationError,
    ServiceError,
    StudentNotFound,
    Unauthorized,
    setup_error_handling,
)

__all__ = [
    "setup_rate_limiting",
    "limiter",
    "get_rate_limit",
    "setup_error_handling",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "ExerciseNotFound",
    "StudentNotFound",
    "PersistenceError",
    "RecommendationError",
    "InvalidStudentId",
    "Unauthorized",
    "Forbidden",
    "InvalidInput",
]
