"""API Routers package."""

from reved.routers import health as health_router
from reved.routers import students as students_router

__all__ = ["health_router", "students_router"]
