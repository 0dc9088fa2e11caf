"""
Cache store implementations: in-process for development/testing, Redis for production.
"""

from __future__ import annotations

import fnmatch
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from redis.asyncio import Redis

from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.repositories.base import CacheStore

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCacheRepository(CacheStore):
    """
    In-memory cache repository for development/testing.
    """

    def __init__(self) -> None:
        self._cache: dict[str, dict[str, Any]] = {}

    def _live_entry(self, key: str) -> Optional[dict[str, Any]]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry["expires_at"] <= _now():
            del self._cache[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        """Get a value from cache."""
        entry = self._live_entry(key)
        return entry["value"] if entry else None

    async def set_with_ttl(self, key: str, value: str, ttl: timedelta) -> None:
        """Set a value in cache."""
        self._cache[key] = {
            "value": value,
            "expires_at": _now() + ttl,
            "created_at": _now(),
        }
        logger.debug("Cache set", key=key, ttl=int(ttl.total_seconds()))

    async def exists(self, key: str) -> bool:
        """Check if a key exists in cache."""
        return self._live_entry(key) is not None

    async def delete(self, key: str) -> int:
        """Delete a key from cache."""
        if self._live_entry(key) is None:
            return 0
        del self._cache[key]
        return 1

    async def delete_matching(self, pattern: str) -> int:
        """Delete all entries whose key matches a glob pattern."""
        matched = [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self._cache[key]
        if matched:
            logger.info("Cache cleared", pattern=pattern, count=len(matched))
        return len(matched)

    async def ttl_remaining(self, key: str) -> Optional[timedelta]:
        entry = self._live_entry(key)
        if entry is None:
            return None
        return entry["expires_at"] - _now()

    async def clear_expired(self) -> int:
        """Clear expired cache entries."""
        now = _now()
        expired_keys = [
            key for key, entry in self._cache.items()
            if entry["expires_at"] <= now
        ]

        for key in expired_keys:
            del self._cache[key]

        if expired_keys:
            logger.debug("Cleared expired cache entries", count=len(expired_keys))

        return len(expired_keys)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        await self.clear_expired()
        return {"size": len(self._cache), "memory_used": None}


class RedisCacheRepository(CacheStore):
    """
    Redis cache repository for production.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "youtrack:analyzer:") -> None:
        """
        Initialize with a Redis client.

        Args:
            redis_client: Redis async client (created with decode_responses=True)
            key_prefix: Prefix for all cache keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "youtrack:analyzer:") -> "RedisCacheRepository":
        return cls(Redis.from_url(url, decode_responses=True), key_prefix=key_prefix)

    def _make_key(self, key: str) -> str:
        """Create a prefixed key."""
        if key.startswith(self.key_prefix):
            return key
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        """Get a value from cache."""
        value = await self.redis.get(self._make_key(key))
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set_with_ttl(self, key: str, value: str, ttl: timedelta) -> None:
        """Set a value in cache."""
        seconds = max(1, int(ttl.total_seconds()))
        await self.redis.setex(self._make_key(key), seconds, value)
        logger.debug("Cache set", key=key, ttl=seconds)

    async def exists(self, key: str) -> bool:
        """Check if a key exists in cache."""
        return await self.redis.exists(self._make_key(key)) > 0

    async def delete(self, key: str) -> int:
        """Delete a key from cache."""
        return await self.redis.delete(self._make_key(key))

    async def delete_matching(self, pattern: str) -> int:
        """Delete entries matching a pattern, found with SCAN."""
        full_pattern = self._make_key(pattern)
        keys = []

        async for key in self.redis.scan_iter(match=full_pattern):
            keys.append(key)

        if not keys:
            return 0

        deleted = await self.redis.delete(*keys)
        logger.info("Cache cleared", pattern=pattern, count=deleted)
        return deleted

    async def ttl_remaining(self, key: str) -> Optional[timedelta]:
        seconds = await self.redis.ttl(self._make_key(key))
        if seconds is None or seconds <= 0:
            return None
        return timedelta(seconds=seconds)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        info = await self.redis.info("memory")
        return {
            "size": await self.redis.dbsize(),
            "memory_used": info.get("used_memory"),
            "memory_used_human": info.get("used_memory_human", "unknown"),
        }

    async def ping(self) -> bool:
        return bool(await self.redis.ping())

    async def close(self) -> None:
        await self.redis.aclose()
