"""
Repository and cache store interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Optional

from workflow_analyzer.domain.activity import Activity, ActivityPage
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.project import Project
from workflow_analyzer.domain.workflow import Workflow, WorkflowRule


class CacheStore(ABC):
    """
    Async key -> string store with per-key TTL.

    Every operation is atomic at the store level; there are no guarantees
    across keys.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a value, or None when absent or expired."""
        ...

    @abstractmethod
    async def set_with_ttl(self, key: str, value: str, ttl: timedelta) -> None:
        """Store a value that expires after ``ttl`` (seconds granularity)."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Delete a key, returning the number of keys removed."""
        ...

    @abstractmethod
    async def delete_matching(self, pattern: str) -> int:
        """Delete keys matching a glob pattern, returning the number removed."""
        ...

    @abstractmethod
    async def ttl_remaining(self, key: str) -> Optional[timedelta]:
        """Remaining lifetime of a key, or None if absent or persistent."""
        ...

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """Aggregate statistics: at least ``size``, optionally ``memory_used``."""
        ...

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class IssueRepository(ABC):
    """Read access to issues, their history and their projects."""

    @abstractmethod
    async def get_issue(self, issue_id: str) -> Issue:
        ...

    @abstractmethod
    async def get_issues(self, issue_ids: list[str]) -> list[Issue]:
        """Several issues at once; an empty id list yields an empty result."""
        ...

    @abstractmethod
    async def search_issues(self, query: str, limit: int = 100, offset: int = 0) -> list[Issue]:
        ...

    @abstractmethod
    async def get_project_issues(
        self,
        project_id: str,
        state: Optional[str] = None,
        assignee: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Issue]:
        ...

    @abstractmethod
    async def get_issue_activities(
        self,
        issue_id: str,
        categories: Optional[list[str]] = None,
        limit: int = 100,
        cursor: Optional[str] = None,
    ) -> ActivityPage:
        ...

    @abstractmethod
    async def get_projects(self, archived: bool = False, limit: int = 100, offset: int = 0) -> list[Project]:
        ...

    @abstractmethod
    async def get_project(self, project_id: str) -> Project:
        ...

    @abstractmethod
    async def exists(self, issue_id: str) -> bool:
        ...

    @abstractmethod
    async def invalidate_cache(self, issue_id: str) -> None:
        ...

    @abstractmethod
    async def invalidate_project_cache(self, project_id: str) -> None:
        ...

    async def get_recent_activities(self, issue_id: str, limit: int = 10) -> list[Activity]:
        """The first ``limit`` activities of an issue, without paging."""
        page = await self.get_issue_activities(issue_id, limit=limit)
        return page.activities


class WorkflowRepository(ABC):
    """Read access to workflows and their rules."""

    @abstractmethod
    async def get_project_workflows(self, project_id: str) -> list[Workflow]:
        ...

    @abstractmethod
    async def get_workflow(self, workflow_id: str) -> Workflow:
        ...

    @abstractmethod
    async def get_workflow_rules(self, workflow_id: str) -> list[WorkflowRule]:
        ...

    @abstractmethod
    async def get_project_rules(self, project_id: str) -> list[WorkflowRule]:
        """All rules of all workflows attached to a project."""
        ...

    @abstractmethod
    async def exists(self, workflow_id: str) -> bool:
        ...

    @abstractmethod
    async def invalidate_cache(self, workflow_id: str) -> None:
        ...

    @abstractmethod
    async def invalidate_project_cache(self, project_id: str) -> None:
        ...

    async def get_project_rules_by_type(self, project_id: str, rule_type: str) -> list[WorkflowRule]:
        """Project rules whose type matches ``rule_type`` (case-insensitive)."""
        wanted = rule_type.lower().replace("_", "-")
        rules = await self.get_project_rules(project_id)
        return [rule for rule in rules if rule.type.value == wanted]

    async def get_state_machine_rules(self, project_id: str) -> list[WorkflowRule]:
        return await self.get_project_rules_by_type(project_id, "state-machine")

    async def get_on_change_rules(self, project_id: str) -> list[WorkflowRule]:
        return await self.get_project_rules_by_type(project_id, "on-change")
