"""
RevEd Kids Learning Core API

Application entry point.

Run:
    uvicorn reved.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reved.config import settings
from reved.db.base import engine, init_db
from reved.db.redis import close_redis_pool
from reved.middleware import setup_error_handling, setup_rate_limiting
from reved.routers import health_router, students_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}")
    await init_db()
    yield
    await close_redis_pool()
    await engine.dispose()
    logger.info(f"{settings.APP_NAME} stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware and routers."""
    application = FastAPI(title=f"{settings.APP_NAME} API", lifespan=lifespan)

    setup_error_handling(application, debug=settings.DEBUG)
    setup_rate_limiting(application, enabled=settings.RATE_LIMIT_ENABLED)

    application.include_router(health_router.router)
    application.include_router(students_router.router)
    return application


app = create_app()
