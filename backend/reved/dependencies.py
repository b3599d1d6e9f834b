"""
FastAPI Dependencies

Session authentication and per-student authorization.

Sessions are issued by the authentication service and stored in Redis
(see reved.db.redis.SessionStore). This service only reads them.
"""

from fastapi import Depends, Path
from fastapi.security import APIKeyHeader

from reved.config import settings
from reved.db.redis import session_store
from reved.middleware.error_handling import Forbidden, InvalidStudentId, Unauthorized

# Session token header scheme
session_header = APIKeyHeader(name=settings.SESSION_HEADER_NAME, auto_error=False)


async def get_session_student_id(
    token: str | None = Depends(session_header),
) -> int:
    """
    Resolve the session token to the authenticated student's id.

    Raises:
        Unauthorized: Token missing, unknown or expired, or the session
            does not belong to a student
    """
    if not token:
        raise Unauthorized("Missing session token")

    session = await session_store.get_session(token)
    if not session or session.get("student_id") is None:
        raise Unauthorized("Session expired or invalid")

    return int(session["student_id"])


def parse_student_id(raw: str) -> int:
    """
    Parse a student id path segment.

    Raises:
        InvalidStudentId: Not a positive integer
    """
    try:
        student_id = int(raw)
    except (TypeError, ValueError):
        raise InvalidStudentId(f"Invalid student id: {raw!r}")
    if student_id <= 0:
        raise InvalidStudentId(f"Invalid student id: {raw!r}")
    return student_id


async def authorize_student(
    student_id: str = Path(..., description="Student ID"),
    session_student_id: int = Depends(get_session_student_id),
) -> int:
    """
    Authorize access to a student's resources.

    A pupil may only read and write their own data.

    Returns:
        The validated student id

    Raises:
        Unauthorized: No valid session
        InvalidStudentId: Path id is not a positive integer
        Forbidden: Path id differs from the session's student
    """
    requested_id = parse_student_id(student_id)
    if requested_id != session_student_id:
        raise Forbidden(
            f"Student {session_student_id} may not access student {requested_id}"
        )
    return requested_id


# Dependency that can be used in routers
RequireStudentAccess = Depends(authorize_student)
