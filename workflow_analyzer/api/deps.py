"""
API dependencies for dependency injection.
"""

from typing import Optional

from workflow_analyzer.core.config import settings
from workflow_analyzer.core.exceptions import ConfigurationError
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.core.retry import RetryPolicy
from workflow_analyzer.llm.completion import OpenAIChatCompletionClient
from workflow_analyzer.repositories.base import CacheStore, IssueRepository, WorkflowRepository
from workflow_analyzer.repositories.cache_aside import CacheAside
from workflow_analyzer.repositories.cache_repo import InMemoryCacheRepository, RedisCacheRepository
from workflow_analyzer.repositories.issue_repo import CachedIssueRepository, YouTrackIssueRepository
from workflow_analyzer.repositories.workflow_repo import (
    CachedWorkflowRepository,
    YouTrackWorkflowRepository,
)
from workflow_analyzer.services.analysis_service import WorkflowAnalyzer
from workflow_analyzer.youtrack.api_service import YouTrackApiService
from workflow_analyzer.youtrack.client import YouTrackClient

logger = get_logger(__name__)


class ServiceContainer:
    """
    Container for all application services.
    Provides singleton instances of services.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def initialize(self) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        if not settings.youtrack.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "YOUTRACK_BASE_URL must be an http(s) URL",
                details={"base_url": settings.youtrack.base_url},
            )
        if not settings.youtrack.token:
            logger.warning("YOUTRACK_TOKEN is not set, requests will be anonymous")

        # Tracker access
        self._youtrack_client = YouTrackClient(
            base_url=settings.youtrack.base_url,
            token=settings.youtrack.token,
            timeout=settings.youtrack.timeout,
        )
        self._youtrack_api = YouTrackApiService(self._youtrack_client)

        # Cache store
        if settings.redis.enabled:
            self._cache_store: CacheStore = RedisCacheRepository.from_url(
                settings.redis.url,
                key_prefix=settings.redis.key_prefix,
            )
        else:
            self._cache_store = InMemoryCacheRepository()
        logger.info("Cache store selected", store=type(self._cache_store).__name__)

        # Repositories
        retry_policy = RetryPolicy(
            max_attempts=settings.retry.max_attempts,
            delay=settings.retry.delay_seconds,
        )
        cache = CacheAside(self._cache_store)
        self._issue_repository = CachedIssueRepository(
            YouTrackIssueRepository(self._youtrack_api, retry_policy),
            cache,
        )
        self._workflow_repository = CachedWorkflowRepository(
            YouTrackWorkflowRepository(self._youtrack_api, retry_policy),
            cache,
        )

        # Completion provider
        self._completion_client = OpenAIChatCompletionClient(
            api_key=settings.llm.api_key,
            model=settings.llm.model,
            base_url=settings.llm.base_url,
            temperature=settings.llm.temperature,
            max_tokens=settings.llm.max_tokens,
            timeout=settings.llm.timeout,
        )

        self._analyzer = WorkflowAnalyzer(
            issue_repository=self._issue_repository,
            workflow_repository=self._workflow_repository,
            completion_client=self._completion_client,
            youtrack_base_url=settings.youtrack.base_url,
        )

        self._initialized = True

    async def shutdown(self) -> None:
        """Close network clients opened by ``initialize``."""
        if not self._initialized:
            return
        for name, close in (
            ("youtrack", self._youtrack_api.close),
            ("completion", self._completion_client.close),
            ("cache", self._cache_store.close),
        ):
            try:
                await close()
            except Exception as e:
                logger.warning("Failed to close client", client=name, error=str(e))
        self._initialized = False

    @property
    def analyzer(self) -> WorkflowAnalyzer:
        """Get the workflow analyzer."""
        self.initialize()
        return self._analyzer

    @property
    def issue_repository(self) -> IssueRepository:
        self.initialize()
        return self._issue_repository

    @property
    def workflow_repository(self) -> WorkflowRepository:
        self.initialize()
        return self._workflow_repository

    @property
    def cache_store(self) -> CacheStore:
        """Get the cache store."""
        self.initialize()
        return self._cache_store

    @property
    def youtrack_api(self) -> YouTrackApiService:
        self.initialize()
        return self._youtrack_api


# Singleton container instance
container = ServiceContainer.get_instance()


# Dependency functions for FastAPI
def get_analyzer() -> WorkflowAnalyzer:
    """Get the workflow analyzer instance."""
    return container.analyzer


def get_issue_repository() -> IssueRepository:
    return container.issue_repository


def get_workflow_repository() -> WorkflowRepository:
    return container.workflow_repository


def get_cache_store() -> CacheStore:
    """Get the cache store instance."""
    return container.cache_store


def get_youtrack_api() -> YouTrackApiService:
    """Get the YouTrack API service instance."""
    return container.youtrack_api
