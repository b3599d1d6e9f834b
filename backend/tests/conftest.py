"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across the unit tests:
environment isolation, mocked Redis, and an in-memory SQLite database
seeded with a small curriculum.
"""

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

# Settings are read at import time; rate limits would leak between tests
# sharing the TestClient address.
os.environ["RATE_LIMIT_ENABLED"] = "false"


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """
    Set up test environment variables before any tests run.

    This ensures tests run with predictable configuration, overriding
    any values from .env files to ensure test isolation.
    """
    # Store original environment
    original_env = os.environ.copy()

    test_env = {
        "POSTGRES_HOST": os.environ.get("POSTGRES_HOST", "localhost"),
        "POSTGRES_PORT": os.environ.get("POSTGRES_PORT", "5432"),
        "POSTGRES_USER": os.environ.get("POSTGRES_TEST_USER", "testuser"),
        "POSTGRES_PASSWORD": os.environ.get("POSTGRES_TEST_PASSWORD", "testpass"),
        "POSTGRES_DB": os.environ.get("POSTGRES_TEST_DB", "testdb"),
        "REDIS_URL": os.environ.get("REDIS_URL", "redis://localhost:6379/1"),
        "RATE_LIMIT_ENABLED": "false",
        "DEBUG": "true",
    }
    os.environ.update(test_env)

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


# ============================================================================
# Sample Configuration Data
# ============================================================================


@pytest.fixture
def sample_yaml_config() -> dict[str, Any]:
    """
    Provide a sample YAML configuration for testing.

    This matches the structure of config/default.yaml.
    """
    return {
        "app": {"name": "Test RevEd Kids"},
        "database": {
            "pool_size": 3,
            "max_overflow": 5,
            "pool_timeout": 10,
        },
        "redis": {
            "session_ttl": 1800,
            "cache_ttl": 120,
        },
    }


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """
    Create a mock Redis client for unit testing.

    This allows testing Redis-dependent code without a real Redis server.
    """
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.exists = AsyncMock(return_value=1)
    mock.expire = AsyncMock(return_value=True)
    mock.ping = AsyncMock(return_value=True)
    mock.keys = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def mock_cache() -> MagicMock:
    """
    Create a mock RedisCache for service tests.

    Starts empty: every get is a miss.
    """
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=None)
    mock.clear_pattern = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Create a mock database session for unit testing.
    """
    mock = MagicMock()
    mock.execute = AsyncMock()
    mock.get = AsyncMock()
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.refresh = AsyncMock()
    mock.close = AsyncMock()
    return mock


# ============================================================================
# In-memory Database
# ============================================================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an async session on a fresh in-memory SQLite database.

    The schema is created from the ORM metadata; every test gets its own
    database.
    """
    from reved.db.base import init_db

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def curriculum(db_session: AsyncSession) -> SimpleNamespace:
    """
    Seed two students and a small curriculum.

    Students:
        emma (id 1, CE1, 0 points), leo (id 2, CP, 95 points)

    Modules / exercises:
        Nombres (MA, CE1):  1 discovery/order 1/10 pts
                            2 consolidation/order 2/15 pts
                            3 mastery/order 3/20 pts
                            4 inactive
        Lecture (FR, CE1):  5 discovery/order 1
        Archive (MA, CE1, inactive module): 6
        Additions (MA, CP): 7 discovery/order 1
    """
    from reved.db.models import Exercise, Module, Student

    emma = Student(
        id=1, first_name="Emma", last_name="Martin", grade_level="CE1",
        total_points=0, current_level=1,
    )
    leo = Student(
        id=2, first_name="Leo", last_name="Bernard", grade_level="CP",
        total_points=95, current_level=1,
    )

    numbers = Module(id=1, title="Nombres", subject="MA", grade_level="CE1", order=1, is_active=True)
    reading = Module(id=2, title="Lecture", subject="FR", grade_level="CE1", order=2, is_active=True)
    archive = Module(id=3, title="Archive", subject="MA", grade_level="CE1", order=3, is_active=False)
    additions = Module(id=4, title="Additions", subject="MA", grade_level="CP", order=1, is_active=True)

    def exercise(id, module, difficulty, order, points=10, is_active=True):
        return Exercise(
            id=id,
            module_id=module.id,
            title=f"Exercise {id}",
            instructions="Calcule",
            exercise_type="CALCUL",
            difficulty=difficulty,
            points_on_success=points,
            estimated_seconds=120,
            order=order,
            is_active=is_active,
        )

    exercises = [
        exercise(1, numbers, "discovery", 1, points=10),
        exercise(2, numbers, "consolidation", 2, points=15),
        exercise(3, numbers, "mastery", 3, points=20),
        exercise(4, numbers, "discovery", 4, is_active=False),
        exercise(5, reading, "discovery", 1),
        exercise(6, archive, "discovery", 1),
        exercise(7, additions, "discovery", 1),
    ]

    db_session.add_all([emma, leo, numbers, reading, archive, additions, *exercises])
    await db_session.commit()

    return SimpleNamespace(
        emma=emma,
        leo=leo,
        modules={m.id: m for m in (numbers, reading, archive, additions)},
        exercises={e.id: e for e in exercises},
    )
