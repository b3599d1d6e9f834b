"""
Redis Connection and Utilities

Provides Redis connection pooling, the recommendation cache and the
session lookup used for authorization.

Usage:
    from reved.db.redis import get_redis, RedisCache, SessionStore

    # Get Redis connection
    redis = await get_redis()
    await redis.set("key", "value")

    # Namespaced JSON cache
    cache = RedisCache(prefix="recommendations")
    await cache.set("42:10:all:all", [...], ttl=900)
    await cache.clear_pattern("42:*")

    # Session lookup
    session = await session_store.get_session(token)
"""

import json
from typing import Any, Optional

import redis.asyncio as redis

from reved.config import settings, yaml_config


# Get Redis configuration from yaml config
redis_config: dict[str, Any] = yaml_config.get("redis", {})
DEFAULT_CACHE_TTL: int = redis_config.get("cache_ttl", 300)
DEFAULT_SESSION_TTL: int = redis_config.get("session_ttl", 3600)


# Connection pool (lazily initialized)
_redis_pool: Optional[redis.ConnectionPool] = None


async def get_redis_pool() -> redis.ConnectionPool:
    """Get or create the Redis connection pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=10,
        )
    return _redis_pool


async def get_redis() -> redis.Redis:
    """
    Get a Redis connection from the pool.

    Usage:
        redis = await get_redis()
        await redis.set("key", "value")
    """
    pool = await get_redis_pool()
    return redis.Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None


class RedisCache:
    """
    Redis-based JSON cache with a key namespace.

    Keys are stored as "{prefix}:{key}". Values must be JSON serializable.
    """

    def __init__(self, prefix: str = "cache") -> None:
        self.prefix = prefix

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get a value from cache."""
        r = await get_redis()
        value = await r.get(self._full_key(key))
        if value:
            return json.loads(value)
        return None

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> None:
        """Set a value in cache."""
        r = await get_redis()
        await r.setex(self._full_key(key), ttl, json.dumps(value))

    async def clear_pattern(self, pattern: str) -> int:
        """
        Clear all keys matching a glob pattern.

        Returns:
            Number of keys deleted.
        """
        r = await get_redis()
        keys = await r.keys(self._full_key(pattern))
        if keys:
            return await r.delete(*keys)
        return 0


class SessionStore:
    """
    Redis-based session lookup.

    Sessions are issued by the authentication service (outside this
    codebase) and stored as JSON under "{prefix}:{session_id}". A session
    for a pupil carries at least:

        {"student_id": 42}

    Each successful read refreshes the TTL (sliding expiration).
    """

    def __init__(self, prefix: str = "session") -> None:
        """
        Initialize the session store.

        Args:
            prefix: Redis key prefix for namespacing (default: "session").
        """
        self.prefix = prefix
        self.ttl = DEFAULT_SESSION_TTL

    def _make_key(self, session_id: str) -> str:
        """Generate a namespaced Redis key for a session."""
        return f"{self.prefix}:{session_id}"

    async def get_session(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Retrieve session data and refresh its expiration.

        Returns:
            Session data dictionary if found, None if expired or not found.
        """
        r = await get_redis()
        key = self._make_key(session_id)
        data = await r.get(key)
        if data:
            await r.expire(key, self.ttl)
            return json.loads(data)
        return None


# Pre-configured instances
recommendation_cache = RedisCache(prefix="recommendations")
session_store = SessionStore()
