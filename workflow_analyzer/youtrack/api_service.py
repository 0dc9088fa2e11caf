"""
Typed YouTrack operations built on ``YouTrackClient``.
"""

from __future__ import annotations

from typing import Optional

from workflow_analyzer.core.constants import (
    ACTIVITY_FIELDS,
    ISSUE_FIELDS,
    PROJECT_FIELDS,
    RULE_FIELDS,
    WORKFLOW_FIELDS,
    YOUTRACK_ADMIN_API_PREFIX,
    YOUTRACK_API_PREFIX,
)
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.domain.activity import ActivityPage
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.project import Project
from workflow_analyzer.domain.workflow import Workflow, WorkflowRule
from workflow_analyzer.youtrack import mappers
from workflow_analyzer.youtrack.client import YouTrackClient

logger = get_logger(__name__)


def project_issues_query(project_id: str, state: Optional[str] = None, assignee: Optional[str] = None) -> str:
    """YouTrack search query selecting a project's issues, optionally narrowed."""
    parts = [f"project: {project_id}"]
    if state:
        parts.append(f"state: {state}")
    if assignee:
        parts.append(f"assignee: {assignee}")
    return " and ".join(parts)


class YouTrackApiService:
    """
    Fetches issues, activities, projects and workflows and maps them to domain models.
    Errors from the client propagate unchanged.
    """

    def __init__(self, client: YouTrackClient) -> None:
        self.client = client

    async def get_issue(self, issue_id: str) -> Issue:
        logger.debug("Fetching issue", issue_id=issue_id)
        data = await self.client.get(
            f"{YOUTRACK_API_PREFIX}/issues/{issue_id}",
            params={"fields": ISSUE_FIELDS},
        )
        return mappers.to_issue(data)

    async def search_issues(self, query: str, limit: int = 100, offset: int = 0) -> list[Issue]:
        logger.debug("Searching issues", query=query, limit=limit, offset=offset)
        data = await self.client.get(
            f"{YOUTRACK_API_PREFIX}/issues",
            params={
                "query": query,
                "fields": ISSUE_FIELDS,
                "$top": str(limit),
                "$skip": str(offset),
            },
        )
        return [mappers.to_issue(item) for item in data or []]

    async def get_issues(self, issue_ids: list[str]) -> list[Issue]:
        """Fetch several issues with one id-disjunction query."""
        logger.debug("Fetching issues", count=len(issue_ids))
        query = " or ".join(f"id: {issue_id}" for issue_id in issue_ids)
        data = await self.client.get(
            f"{YOUTRACK_API_PREFIX}/issues",
            params={"query": query, "fields": ISSUE_FIELDS, "$top": str(len(issue_ids))},
        )
        return [mappers.to_issue(item) for item in data or []]

    async def get_project_issues(
        self,
        project_id: str,
        state: Optional[str] = None,
        assignee: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Issue]:
        return await self.search_issues(project_issues_query(project_id, state, assignee), limit, offset)

    async def get_issue_activities(
        self,
        issue_id: str,
        categories: Optional[list[str]] = None,
        limit: int = 100,
        cursor: Optional[str] = None,
    ) -> ActivityPage:
        logger.debug("Fetching activities for issue", issue_id=issue_id, limit=limit, cursor=cursor)
        params = {"fields": ACTIVITY_FIELDS, "$top": str(limit)}
        if categories:
            params["categories"] = ",".join(categories)
        if cursor:
            params["cursor"] = cursor
        data = await self.client.get(f"{YOUTRACK_API_PREFIX}/issues/{issue_id}/activities", params=params)
        return mappers.to_activity_page(data)

    async def get_projects(self, archived: bool = False, limit: int = 100, offset: int = 0) -> list[Project]:
        """List projects; archived ones are included only when ``archived`` is set."""
        logger.debug("Fetching projects", archived=archived, limit=limit, offset=offset)
        data = await self.client.get(
            f"{YOUTRACK_ADMIN_API_PREFIX}/projects",
            params={
                "fields": PROJECT_FIELDS,
                "query": "" if archived else "archived: false",
                "$top": str(limit),
                "$skip": str(offset),
            },
        )
        return [mappers.to_project(item) for item in data or []]

    async def get_project(self, project_id: str) -> Project:
        logger.debug("Fetching project", project_id=project_id)
        data = await self.client.get(
            f"{YOUTRACK_ADMIN_API_PREFIX}/projects/{project_id}",
            params={"fields": PROJECT_FIELDS},
        )
        return mappers.to_project(data)

    async def get_project_workflows(self, project_id: str) -> list[Workflow]:
        logger.debug("Fetching workflows for project", project_id=project_id)
        data = await self.client.get(
            f"{YOUTRACK_ADMIN_API_PREFIX}/projects/{project_id}/workflows",
            params={"fields": WORKFLOW_FIELDS},
        )
        return [mappers.to_workflow(item) for item in data or []]

    async def get_workflow(self, workflow_id: str) -> Workflow:
        logger.debug("Fetching workflow", workflow_id=workflow_id)
        data = await self.client.get(
            f"{YOUTRACK_ADMIN_API_PREFIX}/workflows/{workflow_id}",
            params={"fields": WORKFLOW_FIELDS},
        )
        return mappers.to_workflow(data)

    async def get_workflow_rules(self, workflow_id: str) -> list[WorkflowRule]:
        logger.debug("Fetching rules for workflow", workflow_id=workflow_id)
        data = await self.client.get(
            f"{YOUTRACK_ADMIN_API_PREFIX}/workflows/{workflow_id}/rules",
            params={"fields": RULE_FIELDS},
        )
        return [mappers.to_rule(item) for item in data or []]

    async def test_connection(self) -> bool:
        """Return True when the token can read the current user."""
        try:
            await self.client.get(
                f"{YOUTRACK_API_PREFIX}/users/me",
                params={"fields": "id,login"},
            )
        except Exception as e:
            logger.warning("YouTrack connection test failed", error=str(e))
            return False
        logger.info("Successfully connected to YouTrack")
        return True

    async def close(self) -> None:
        await self.client.close()
