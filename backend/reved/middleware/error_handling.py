"""
Error Handling

Provides consistent, informative error responses across the API.

Features:
- Standardized error response format
- Correlation IDs for log tracking
- Sanitized responses (hides internal details in production)
- Domain exception classes carrying HTTP status and machine-readable code

Usage:
    from reved.middleware.error_handling import setup_error_handling, StudentNotFound

    setup_error_handling(app, debug=settings.DEBUG)

    raise StudentNotFound(f"Student {student_id} not found")

Exception handling hierarchy:
    - HTTPException: FastAPI's built-in handler
    - RequestValidationError: rendered as InvalidInput (422, INVALID_INPUT)
    - ServiceError: registered exception handler → structured JSON response
    - Exception: ErrorHandlingMiddleware catch-all → sanitized 500 response
"""

import logging
import traceback
from datetime import datetime, timezone
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - HTTP status code
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Database connection failed", status_code=503)
    """

    status_code: int = 500
    error_code: str = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = None,
        error_code: str = None,
        details: dict = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class NotFoundError(ServiceError):
    """Resource not found error."""

    status_code = 404
    error_code = "NOT_FOUND"


class StudentNotFound(NotFoundError):
    """Raised when a student id does not match any student."""

    error_code = "STUDENT_NOT_FOUND"


class ExerciseNotFound(NotFoundError):
    """Raised when an exercise is missing or inactive."""

    error_code = "EXERCISE_NOT_FOUND"


class PersistenceError(ServiceError):
    """
    Database write failure.

    Raised when recording an attempt cannot be committed. Nothing of the
    attempt is kept, so the client may safely resubmit.
    """

    status_code = 500
    error_code = "PERSISTENCE_ERROR"


class RecommendationError(ServiceError):
    """Raised when recommendation queries or scoring fail."""

    status_code = 500
    error_code = "RECOMMENDATION_ERROR"


class InvalidStudentId(ServiceError):
    """Path student id is not a positive integer."""

    status_code = 400
    error_code = "INVALID_STUDENT_ID"


class Unauthorized(ServiceError):
    """Missing or expired session."""

    status_code = 401
    error_code = "UNAUTHORIZED"


class Forbidden(ServiceError):
    """
    Authorization error.

    Raised when the session's student differs from the requested student.
    """

    status_code = 403
    error_code = "FORBIDDEN"


class InvalidInput(ServiceError):
    """
    Data validation error.

    Used to render request schema validation failures.
    """

    status_code = 422
    error_code = "INVALID_INPUT"


# =============================================================================
# Error Handling Middleware
# =============================================================================


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    - Catches unhandled exceptions
    - Logs with correlation ID
    - Returns consistent error format
    - Hides internal details in production
    """

    def __init__(self, app, debug: bool = False):
        """
        Initialize middleware.

        Args:
            app: FastAPI/Starlette application
            debug: Whether to include stack traces in responses
        """
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        """Process request and handle any errors."""
        error_id = str(uuid4())[:8]

        try:
            response = await call_next(request)
            return response

        except HTTPException:
            # Let FastAPI handle HTTP exceptions
            raise

        except ServiceError as e:
            return _service_error_response(e, request, error_id, self.debug)

        except Exception as e:
            # Log full traceback for unexpected errors
            logger.error(
                f"[{error_id}] Unhandled error: {type(e).__name__}: {e}",
                extra={
                    "error_id": error_id,
                    "path": request.url.path,
                    "method": request.method,
                    "traceback": traceback.format_exc(),
                },
            )

            # Return sanitized response
            content = {
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "error_id": error_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

            # Include details in debug mode
            if self.debug:
                content["details"] = {
                    "exception": type(e).__name__,
                    "message": str(e),
                    "traceback": traceback.format_exc(),
                }

            return JSONResponse(status_code=500, content=content)


def _service_error_response(
    exc: ServiceError,
    request: Request,
    error_id: str,
    debug: bool,
) -> JSONResponse:
    """Log a ServiceError and render it in the standard error format."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"[{error_id}] {exc.error_code}: {exc.message}",
        extra={
            "error_id": error_id,
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "error_id": error_id,
            "details": exc.details if debug else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# =============================================================================
# Setup Function
# =============================================================================


def setup_error_handling(app: FastAPI, debug: bool = False) -> None:
    """
    Configure error handling on the FastAPI app.

    ServiceErrors are rendered by an exception handler so they never reach
    the catch-all middleware; anything else is sanitized by the middleware.

    Args:
        app: FastAPI application instance
        debug: Whether to include stack traces in responses
    """

    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        return _service_error_response(exc, request, str(uuid4())[:8], debug)

    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = InvalidInput(
            "Request validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )
        # Field errors describe the client's own input, so they are always shown.
        return _service_error_response(error, request, str(uuid4())[:8], True)

    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    logger.info(f"Error handling enabled (debug={debug})")
