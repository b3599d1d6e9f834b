"""
Database Base Configuration

Async SQLAlchemy engine, session factory and declarative base for the
learning core. PostgreSQL (asyncpg) in production; tests build their own
SQLite engine against the same metadata.

Timestamps are stored through UTCDateTime so every datetime read back from
the database is timezone-aware UTC, whatever the driver returns.

Usage:
    from reved.db.base import Base, UTCDateTime, get_db

    @router.get("/{student_id}")
    async def handler(db: AsyncSession = Depends(get_db)):
        ...
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from reved.config import settings, yaml_config


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime column.

    Naive values are taken to be UTC on write. SQLite has no timezone
    storage and returns naive values, so results are re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime], dialect: Any
    ) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(
        self, value: Optional[datetime], dialect: Any
    ) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def build_engine(url: str, db_config: dict[str, Any]) -> AsyncEngine:
    """
    Create the async engine with pool settings from the YAML "database" block.

    Stale connections are detected on checkout (pool_pre_ping) and recycled
    after pool_recycle seconds.
    """
    return create_async_engine(
        url,
        pool_size=db_config.get("pool_size", 5),
        max_overflow=db_config.get("max_overflow", 10),
        pool_timeout=db_config.get("pool_timeout", 30),
        pool_recycle=db_config.get("pool_recycle", 1800),
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


engine = build_engine(settings.POSTGRES_URL, yaml_config.get("database", {}))

# Attribute access after commit is common in the services (building
# responses from committed rows), so instances are not expired on commit.
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base; datetime annotations map to UTCDateTime."""

    type_annotation_map = {datetime: UTCDateTime}


# Register models on Base.metadata
from reved.db import models  # noqa: F401, E402


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Services commit their own units of work; the commit here flushes
    anything left pending by read-only handlers (last access stamps).
    Any exception rolls the session back before propagating.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create missing tables on the given engine (the app engine by default)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
