"""
Workflow repositories: remote (retried, fan-out) and cached.
"""

from __future__ import annotations

import asyncio

from pydantic import TypeAdapter

from workflow_analyzer.core.constants import (
    PROJECT_RULES_BY_TYPE_CACHE_KEY,
    PROJECT_RULES_CACHE_KEY,
    PROJECT_WORKFLOWS_CACHE_KEY,
    WORKFLOW_CACHE_KEY,
    WORKFLOW_RULES_CACHE_KEY,
    WORKFLOW_RULES_TTL,
    WORKFLOW_TTL,
)
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.core.retry import RetryPolicy
from workflow_analyzer.domain.workflow import Workflow, WorkflowRule
from workflow_analyzer.repositories.base import WorkflowRepository
from workflow_analyzer.repositories.cache_aside import CacheAside
from workflow_analyzer.youtrack.api_service import YouTrackApiService

logger = get_logger(__name__)

_WORKFLOW = TypeAdapter(Workflow)
_WORKFLOW_LIST = TypeAdapter(list[Workflow])
_RULE_LIST = TypeAdapter(list[WorkflowRule])


class YouTrackWorkflowRepository(WorkflowRepository):
    """
    Workflow access straight from YouTrack, every call under the retry policy.
    """

    def __init__(self, api_service: YouTrackApiService, retry_policy: RetryPolicy | None = None) -> None:
        self.api = api_service
        self.retry = retry_policy or RetryPolicy()

    async def get_project_workflows(self, project_id: str) -> list[Workflow]:
        return await self.retry.run(lambda: self.api.get_project_workflows(project_id))

    async def get_workflow(self, workflow_id: str) -> Workflow:
        return await self.retry.run(lambda: self.api.get_workflow(workflow_id))

    async def get_workflow_rules(self, workflow_id: str) -> list[WorkflowRule]:
        return await self.retry.run(lambda: self.api.get_workflow_rules(workflow_id))

    async def get_project_rules(self, project_id: str) -> list[WorkflowRule]:
        """
        Fetch every workflow of the project, then each workflow's rules concurrently.

        A workflow whose rules cannot be fetched contributes no rules instead
        of failing the whole call. Rules keep per-workflow order, workflows
        keep the listing order; duplicates across workflows are kept.
        """
        workflows = await self.get_project_workflows(project_id)
        if not workflows:
            return []

        results = await asyncio.gather(
            *(self.get_workflow_rules(workflow.id) for workflow in workflows),
            return_exceptions=True,
        )

        rules: list[WorkflowRule] = []
        for workflow, result in zip(workflows, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning(
                    "Failed to fetch workflow rules, skipping workflow",
                    project_id=project_id,
                    workflow_id=workflow.id,
                    error=str(result),
                )
                continue
            rules.extend(result)

        logger.debug(
            "Fetched project rules",
            project_id=project_id,
            workflows=len(workflows),
            rules=len(rules),
        )
        return rules

    async def exists(self, workflow_id: str) -> bool:
        try:
            await self.get_workflow(workflow_id)
        except Exception:
            return False
        return True

    async def invalidate_cache(self, workflow_id: str) -> None:
        logger.debug("Cache invalidation requested for workflow", workflow_id=workflow_id)

    async def invalidate_project_cache(self, project_id: str) -> None:
        logger.debug("Cache invalidation requested for project workflows", project_id=project_id)


class CachedWorkflowRepository(WorkflowRepository):
    """
    Decorates another workflow repository with cache-aside reads.
    """

    def __init__(self, delegate: WorkflowRepository, cache: CacheAside) -> None:
        self.delegate = delegate
        self.cache = cache

    async def get_project_workflows(self, project_id: str) -> list[Workflow]:
        return await self.cache.get_or_load(
            PROJECT_WORKFLOWS_CACHE_KEY.format(project_id=project_id),
            WORKFLOW_TTL,
            lambda: self.delegate.get_project_workflows(project_id),
            _WORKFLOW_LIST,
        )

    async def get_workflow(self, workflow_id: str) -> Workflow:
        return await self.cache.get_or_load(
            WORKFLOW_CACHE_KEY.format(workflow_id=workflow_id),
            WORKFLOW_TTL,
            lambda: self.delegate.get_workflow(workflow_id),
            _WORKFLOW,
        )

    async def get_workflow_rules(self, workflow_id: str) -> list[WorkflowRule]:
        return await self.cache.get_or_load(
            WORKFLOW_RULES_CACHE_KEY.format(workflow_id=workflow_id),
            WORKFLOW_RULES_TTL,
            lambda: self.delegate.get_workflow_rules(workflow_id),
            _RULE_LIST,
        )

    async def get_project_rules(self, project_id: str) -> list[WorkflowRule]:
        # A fan-out that skipped failed workflows is cached like a complete one, for the full TTL
        return await self.cache.get_or_load(
            PROJECT_RULES_CACHE_KEY.format(project_id=project_id),
            WORKFLOW_RULES_TTL,
            lambda: self.delegate.get_project_rules(project_id),
            _RULE_LIST,
        )

    async def get_project_rules_by_type(self, project_id: str, rule_type: str) -> list[WorkflowRule]:
        wanted = rule_type.lower().replace("_", "-")

        async def load() -> list[WorkflowRule]:
            rules = await self.get_project_rules(project_id)
            return [rule for rule in rules if rule.type.value == wanted]

        return await self.cache.get_or_load(
            PROJECT_RULES_BY_TYPE_CACHE_KEY.format(project_id=project_id, rule_type=wanted),
            WORKFLOW_RULES_TTL,
            load,
            _RULE_LIST,
        )

    async def exists(self, workflow_id: str) -> bool:
        return await self.delegate.exists(workflow_id)

    async def invalidate_cache(self, workflow_id: str) -> None:
        await self.cache.invalidate_pattern(f"workflow:*:{workflow_id}")

    async def invalidate_project_cache(self, project_id: str) -> None:
        await self.cache.invalidate_pattern(f"workflow:*project:{project_id}")
        await self.cache.invalidate_pattern(f"workflow:*project:{project_id}:type:*")
