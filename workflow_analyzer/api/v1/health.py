"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from workflow_analyzer.api.deps import get_cache_store, get_youtrack_api
from workflow_analyzer.core.config import settings
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.repositories.base import CacheStore
from workflow_analyzer.youtrack.api_service import YouTrackApiService

logger = get_logger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Basic health check endpoint.
    Returns application status.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
        "timestamp": _now(),
    }


@router.get("/health/ready")
async def readiness_check(
    cache_store: CacheStore = Depends(get_cache_store),
    youtrack_api: YouTrackApiService = Depends(get_youtrack_api),
) -> dict[str, Any]:
    """
    Readiness check endpoint.
    Verifies the cache store and YouTrack are reachable.
    """
    try:
        cache_ok = await cache_store.ping()
    except Exception as e:
        logger.warning("Cache store ping failed", error=str(e))
        cache_ok = False

    checks = {
        "app": True,
        "cache": cache_ok,
        "youtrack": await youtrack_api.test_connection(),
    }

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks,
        "timestamp": _now(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.
    Simple check that the application is running.
    """
    return {"status": "alive"}
