"""
Cache inspection and invalidation endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from workflow_analyzer.api.deps import get_cache_store, get_issue_repository, get_workflow_repository
from workflow_analyzer.core.exceptions import CacheError
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.repositories.base import CacheStore, IssueRepository, WorkflowRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/cache")


@router.get("/stats")
async def cache_stats(cache_store: CacheStore = Depends(get_cache_store)) -> dict[str, Any]:
    """Size and memory usage of the cache store."""
    try:
        stats = await cache_store.get_stats()
    except Exception as e:
        logger.error("Failed to read cache stats", error=str(e))
        raise CacheError(str(e)) from e
    return {"store": type(cache_store).__name__, **stats}


@router.delete("/issues/{issue_id}")
async def invalidate_issue(
    issue_id: str,
    issue_repository: IssueRepository = Depends(get_issue_repository),
) -> dict[str, str]:
    """Drop the cached copy of one issue."""
    await issue_repository.invalidate_cache(issue_id)
    return {"status": "invalidated", "issueId": issue_id}


@router.delete("/projects/{project_id}")
async def invalidate_project(
    project_id: str,
    issue_repository: IssueRepository = Depends(get_issue_repository),
    workflow_repository: WorkflowRepository = Depends(get_workflow_repository),
) -> dict[str, str]:
    """Drop cached issues, workflows and rules of one project."""
    await issue_repository.invalidate_project_cache(project_id)
    await workflow_repository.invalidate_project_cache(project_id)
    return {"status": "invalidated", "projectId": project_id}
