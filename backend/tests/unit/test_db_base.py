"""
Unit Tests for Database Base Configuration

Tests the UTC timestamp column type and the engine builder.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from reved.db.base import UTCDateTime, build_engine
from reved.db.models import ProgressRecord, Student

PARIS_WINTER = timezone(timedelta(hours=1))


class TestUTCDateTime:
    """Conversion rules of the UTCDateTime column type."""

    @pytest.fixture
    def column_type(self) -> UTCDateTime:
        return UTCDateTime()

    def test_none_passes_through(self, column_type) -> None:
        assert column_type.process_bind_param(None, None) is None
        assert column_type.process_result_value(None, None) is None

    def test_bind_converts_to_utc(self, column_type) -> None:
        value = datetime(2024, 3, 1, 11, 0, tzinfo=PARIS_WINTER)

        bound = column_type.process_bind_param(value, None)

        assert bound == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert bound.tzinfo == timezone.utc

    def test_bind_treats_naive_as_utc(self, column_type) -> None:
        bound = column_type.process_bind_param(datetime(2024, 3, 1, 10, 0), None)

        assert bound == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_result_is_tagged_utc(self, column_type) -> None:
        result = column_type.process_result_value(datetime(2024, 3, 1, 10, 0), None)

        assert result.tzinfo == timezone.utc
        assert result == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


class TestTimestampRoundTrip:
    """Timestamps reloaded from SQLite keep their timezone."""

    @pytest.mark.asyncio
    async def test_reloaded_row_is_timezone_aware(self, db_session, curriculum) -> None:
        attempted_at = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        db_session.add(
            ProgressRecord(
                student_id=1,
                exercise_id=1,
                status="completed",
                attempt_count=1,
                success_count=1,
                success_rate=1.0,
                points_earned=10,
                last_attempt_at=attempted_at,
                first_success_at=attempted_at,
                history=[],
            )
        )
        await db_session.commit()

        result = await db_session.execute(
            select(ProgressRecord)
            .where(ProgressRecord.student_id == 1)
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one()

        assert record.first_success_at.tzinfo is not None
        assert record.first_success_at == attempted_at
        assert record.last_attempt_at == attempted_at

    @pytest.mark.asyncio
    async def test_default_created_at_is_utc(self, db_session, curriculum) -> None:
        result = await db_session.execute(
            select(Student)
            .where(Student.id == 1)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one()

        assert student.created_at.utcoffset() == timedelta(0)


class TestBuildEngine:
    """Engine construction from the YAML database block."""

    def test_pool_settings_applied(self) -> None:
        engine = build_engine(
            "postgresql+asyncpg://user:pw@localhost:5432/reved",
            {"pool_size": 3, "max_overflow": 4},
        )

        assert engine.pool.size() == 3
        assert engine.pool._max_overflow == 4
        assert engine.pool._pre_ping is True
