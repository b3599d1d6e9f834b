"""Database package."""

from reved.db.base import Base, UTCDateTime, async_session_maker, engine, get_db, init_db

__all__ = ["engine", "async_session_maker", "Base", "UTCDateTime", "get_db", "init_db"]
