"""
Unit tests for cache-aside loading.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from pydantic import TypeAdapter

from workflow_analyzer.core.exceptions import NetworkError
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.repositories.base import CacheStore
from workflow_analyzer.repositories.cache_aside import CacheAside
from workflow_analyzer.repositories.cache_repo import InMemoryCacheRepository

ISSUE_ADAPTER = TypeAdapter(Issue)
TTL = timedelta(minutes=5)


class TestGetOrLoad:
    """Tests for CacheAside.get_or_load."""

    @pytest.mark.asyncio
    async def test_miss_then_hit_loads_once(self, cache_aside: CacheAside, sample_issue: Issue) -> None:
        loader = AsyncMock(return_value=sample_issue)

        first = await cache_aside.get_or_load("issue:DEMO-42", TTL, loader, ISSUE_ADAPTER)
        second = await cache_aside.get_or_load("issue:DEMO-42", TTL, loader, ISSUE_ADAPTER)

        assert first == sample_issue
        assert second == sample_issue
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_stores_value_with_ttl(
        self,
        cache_aside: CacheAside,
        memory_cache: InMemoryCacheRepository,
        sample_issue: Issue,
    ) -> None:
        await cache_aside.get_or_load("issue:DEMO-42", TTL, AsyncMock(return_value=sample_issue), ISSUE_ADAPTER)

        assert await memory_cache.exists("issue:DEMO-42")
        remaining = await memory_cache.ttl_remaining("issue:DEMO-42")
        assert remaining is not None
        assert timedelta(minutes=4) < remaining <= TTL

    @pytest.mark.asyncio
    async def test_loader_error_propagates_and_nothing_is_cached(
        self,
        cache_aside: CacheAside,
        memory_cache: InMemoryCacheRepository,
    ) -> None:
        loader = AsyncMock(side_effect=NetworkError("down"))

        with pytest.raises(NetworkError):
            await cache_aside.get_or_load("issue:DEMO-42", TTL, loader, ISSUE_ADAPTER)

        assert not await memory_cache.exists("issue:DEMO-42")

    @pytest.mark.asyncio
    async def test_failing_store_falls_back_to_loader(self, sample_issue: Issue) -> None:
        store = AsyncMock(spec=CacheStore)
        store.get.side_effect = ConnectionError("redis down")
        loader = AsyncMock(return_value=sample_issue)

        result = await CacheAside(store).get_or_load("issue:DEMO-42", TTL, loader, ISSUE_ADAPTER)

        assert result == sample_issue
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_failed_write_still_returns_value(self, sample_issue: Issue) -> None:
        store = AsyncMock(spec=CacheStore)
        store.get.return_value = None
        store.set_with_ttl.side_effect = ConnectionError("redis down")

        result = await CacheAside(store).get_or_load(
            "issue:DEMO-42", TTL, AsyncMock(return_value=sample_issue), ISSUE_ADAPTER
        )

        assert result == sample_issue

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_treated_as_miss(
        self,
        cache_aside: CacheAside,
        memory_cache: InMemoryCacheRepository,
        sample_issue: Issue,
    ) -> None:
        await memory_cache.set_with_ttl("issue:DEMO-42", "{not json", TTL)
        loader = AsyncMock(return_value=sample_issue)

        result = await cache_aside.get_or_load("issue:DEMO-42", TTL, loader, ISSUE_ADAPTER)

        assert result == sample_issue
        assert loader.await_count == 1
        assert ISSUE_ADAPTER.validate_json(await memory_cache.get("issue:DEMO-42")) == sample_issue


class TestInvalidation:
    """Tests for best-effort invalidation."""

    @pytest.mark.asyncio
    async def test_invalidate_removes_entry(
        self,
        cache_aside: CacheAside,
        memory_cache: InMemoryCacheRepository,
    ) -> None:
        await memory_cache.set_with_ttl("issue:DEMO-42", "{}", TTL)

        assert await cache_aside.invalidate("issue:DEMO-42") == 1
        assert await memory_cache.get("issue:DEMO-42") is None

    @pytest.mark.asyncio
    async def test_invalidate_pattern(
        self,
        cache_aside: CacheAside,
        memory_cache: InMemoryCacheRepository,
    ) -> None:
        await memory_cache.set_with_ttl("issue:DEMO-1", "{}", TTL)
        await memory_cache.set_with_ttl("issue:DEMO-2", "{}", TTL)
        await memory_cache.set_with_ttl("issue:OTHER-1", "{}", TTL)

        assert await cache_aside.invalidate_pattern("issue:DEMO-*") == 2
        assert await memory_cache.exists("issue:OTHER-1")

    @pytest.mark.asyncio
    async def test_store_failure_during_invalidation_is_swallowed(self) -> None:
        store = AsyncMock(spec=CacheStore)
        store.delete.side_effect = ConnectionError("redis down")
        store.delete_matching.side_effect = ConnectionError("redis down")
        cache = CacheAside(store)

        assert await cache.invalidate("issue:DEMO-42") == 0
        assert await cache.invalidate_pattern("issue:*") == 0
