"""
Issue repositories: remote (retried) and cached.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from pydantic import TypeAdapter

from workflow_analyzer.core.constants import (
    ISSUE_ACTIVITIES_CACHE_KEY,
    ISSUE_ACTIVITIES_TTL,
    ISSUE_CACHE_KEY,
    ISSUE_SEARCH_CACHE_KEY,
    ISSUE_SEARCH_TTL,
    ISSUE_TTL,
    PROJECT_CACHE_KEY,
    PROJECT_ISSUES_CACHE_KEY,
    PROJECT_TTL,
    PROJECTS_CACHE_KEY,
)
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.core.retry import RetryPolicy
from workflow_analyzer.domain.activity import ActivityPage
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.project import Project
from workflow_analyzer.repositories.base import IssueRepository
from workflow_analyzer.repositories.cache_aside import CacheAside
from workflow_analyzer.youtrack.api_service import YouTrackApiService, project_issues_query

logger = get_logger(__name__)

_ISSUE = TypeAdapter(Issue)
_ISSUE_LIST = TypeAdapter(list[Issue])
_ACTIVITY_PAGE = TypeAdapter(ActivityPage)
_PROJECT = TypeAdapter(Project)
_PROJECT_LIST = TypeAdapter(list[Project])


def _query_hash(query: str) -> str:
    return hashlib.sha256(query.encode("utf-8")).hexdigest()[:16]


class YouTrackIssueRepository(IssueRepository):
    """
    Issue access straight from YouTrack, every call under the retry policy.
    """

    def __init__(self, api_service: YouTrackApiService, retry_policy: RetryPolicy | None = None) -> None:
        self.api = api_service
        self.retry = retry_policy or RetryPolicy()

    async def get_issue(self, issue_id: str) -> Issue:
        return await self.retry.run(lambda: self.api.get_issue(issue_id))

    async def get_issues(self, issue_ids: list[str]) -> list[Issue]:
        if not issue_ids:
            return []
        return await self.retry.run(lambda: self.api.get_issues(issue_ids))

    async def search_issues(self, query: str, limit: int = 100, offset: int = 0) -> list[Issue]:
        return await self.retry.run(lambda: self.api.search_issues(query, limit, offset))

    async def get_project_issues(
        self,
        project_id: str,
        state: Optional[str] = None,
        assignee: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Issue]:
        return await self.retry.run(
            lambda: self.api.get_project_issues(project_id, state, assignee, limit, offset)
        )

    async def get_issue_activities(
        self,
        issue_id: str,
        categories: Optional[list[str]] = None,
        limit: int = 100,
        cursor: Optional[str] = None,
    ) -> ActivityPage:
        return await self.retry.run(
            lambda: self.api.get_issue_activities(issue_id, categories, limit, cursor)
        )

    async def get_projects(self, archived: bool = False, limit: int = 100, offset: int = 0) -> list[Project]:
        return await self.retry.run(lambda: self.api.get_projects(archived, limit, offset))

    async def get_project(self, project_id: str) -> Project:
        return await self.retry.run(lambda: self.api.get_project(project_id))

    async def exists(self, issue_id: str) -> bool:
        try:
            await self.get_issue(issue_id)
        except Exception:
            return False
        return True

    async def invalidate_cache(self, issue_id: str) -> None:
        logger.debug("Cache invalidation requested for issue", issue_id=issue_id)

    async def invalidate_project_cache(self, project_id: str) -> None:
        logger.debug("Cache invalidation requested for project", project_id=project_id)


class CachedIssueRepository(IssueRepository):
    """
    Decorates another issue repository with cache-aside reads.

    Batch lookups go straight to the delegate; every other read is cached
    under its own key and TTL.
    """

    def __init__(self, delegate: IssueRepository, cache: CacheAside) -> None:
        self.delegate = delegate
        self.cache = cache

    async def get_issue(self, issue_id: str) -> Issue:
        return await self.cache.get_or_load(
            ISSUE_CACHE_KEY.format(issue_id=issue_id),
            ISSUE_TTL,
            lambda: self.delegate.get_issue(issue_id),
            _ISSUE,
        )

    async def get_issues(self, issue_ids: list[str]) -> list[Issue]:
        return await self.delegate.get_issues(issue_ids)

    async def search_issues(self, query: str, limit: int = 100, offset: int = 0) -> list[Issue]:
        return await self.cache.get_or_load(
            ISSUE_SEARCH_CACHE_KEY.format(query_hash=_query_hash(query), limit=limit, offset=offset),
            ISSUE_SEARCH_TTL,
            lambda: self.delegate.search_issues(query, limit, offset),
            _ISSUE_LIST,
        )

    async def get_project_issues(
        self,
        project_id: str,
        state: Optional[str] = None,
        assignee: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Issue]:
        query = project_issues_query(project_id, state, assignee)
        return await self.cache.get_or_load(
            PROJECT_ISSUES_CACHE_KEY.format(
                project_id=project_id,
                query_hash=_query_hash(query),
                limit=limit,
                offset=offset,
            ),
            ISSUE_TTL,
            lambda: self.delegate.get_project_issues(project_id, state, assignee, limit, offset),
            _ISSUE_LIST,
        )

    async def get_issue_activities(
        self,
        issue_id: str,
        categories: Optional[list[str]] = None,
        limit: int = 100,
        cursor: Optional[str] = None,
    ) -> ActivityPage:
        key = ISSUE_ACTIVITIES_CACHE_KEY.format(
            issue_id=issue_id,
            categories=",".join(categories) if categories else "all",
            limit=limit,
            cursor=cursor or "start",
        )
        return await self.cache.get_or_load(
            key,
            ISSUE_ACTIVITIES_TTL,
            lambda: self.delegate.get_issue_activities(issue_id, categories, limit, cursor),
            _ACTIVITY_PAGE,
        )

    async def get_projects(self, archived: bool = False, limit: int = 100, offset: int = 0) -> list[Project]:
        return await self.cache.get_or_load(
            PROJECTS_CACHE_KEY.format(archived=str(archived).lower(), limit=limit, offset=offset),
            PROJECT_TTL,
            lambda: self.delegate.get_projects(archived, limit, offset),
            _PROJECT_LIST,
        )

    async def get_project(self, project_id: str) -> Project:
        return await self.cache.get_or_load(
            PROJECT_CACHE_KEY.format(project_id=project_id),
            PROJECT_TTL,
            lambda: self.delegate.get_project(project_id),
            _PROJECT,
        )

    async def exists(self, issue_id: str) -> bool:
        return await self.delegate.exists(issue_id)

    async def invalidate_cache(self, issue_id: str) -> None:
        await self.cache.invalidate(ISSUE_CACHE_KEY.format(issue_id=issue_id))
        await self.cache.invalidate_pattern(f"activities:{issue_id}:*")

    async def invalidate_project_cache(self, project_id: str) -> None:
        # Readable issue ids carry the project short name as prefix
        await self.cache.invalidate_pattern(ISSUE_CACHE_KEY.format(issue_id=f"{project_id}-*"))
        await self.cache.invalidate_pattern(f"activities:{project_id}-*")
        await self.cache.invalidate(PROJECT_CACHE_KEY.format(project_id=project_id))
        await self.cache.invalidate_pattern(f"{PROJECT_CACHE_KEY.format(project_id=project_id)}:*")
