"""
Cache-aside access in front of any async loader.

The store is a shared resource; a failing store degrades latency, never
correctness. Concurrent misses on the same key may all run the loader
(no single-flight deduplication).
"""

from __future__ import annotations

from datetime import timedelta
from typing import Awaitable, Callable, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.repositories.base import CacheStore

logger = get_logger(__name__)

T = TypeVar("T")


class CacheAside:
    """
    Wraps loaders with get-or-load caching on a ``CacheStore``.
    """

    def __init__(self, store: CacheStore) -> None:
        self.store = store

    async def get_or_load(
        self,
        key: str,
        ttl: timedelta,
        loader: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        """
        Return the cached value for ``key`` or load, store and return it.

        Exceptions raised by ``loader`` propagate. Exceptions raised by the
        store are logged and the loader result is returned uncached.
        """
        try:
            cached = await self.store.get(key)
        except Exception as e:
            logger.error("Cache read failed, loading without cache", key=key, error=str(e))
            return await loader()

        if cached is not None:
            try:
                value = adapter.validate_json(cached)
            except PydanticValidationError as e:
                logger.warning("Discarding unreadable cache entry", key=key, error=str(e))
            else:
                logger.debug("Cache hit", key=key)
                return value

        logger.debug("Cache miss", key=key)
        value = await loader()

        try:
            await self.store.set_with_ttl(key, adapter.dump_json(value).decode(), ttl)
        except Exception as e:
            logger.error("Cache write failed", key=key, error=str(e))

        return value

    async def invalidate(self, key: str) -> int:
        """Remove one entry. Store failures are logged, never raised."""
        try:
            removed = await self.store.delete(key)
        except Exception as e:
            logger.error("Failed to invalidate key", key=key, error=str(e))
            return 0
        if removed:
            logger.debug("Invalidated cache key", key=key)
        return removed

    async def invalidate_pattern(self, pattern: str) -> int:
        """
        Remove entries matching a glob pattern.

        Best-effort: other replicas may still serve a removed entry until
        their own view of the store catches up.
        """
        try:
            removed = await self.store.delete_matching(pattern)
        except Exception as e:
            logger.error("Failed to invalidate pattern", pattern=pattern, error=str(e))
            return 0
        logger.debug("Invalidated cache keys", pattern=pattern, count=removed)
        return removed
