"""
Pytest configuration and fixtures.
"""

from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from workflow_analyzer.api.deps import (
    get_analyzer,
    get_cache_store,
    get_issue_repository,
    get_workflow_repository,
    get_youtrack_api,
)
from workflow_analyzer.core.constants import RuleType
from workflow_analyzer.core.retry import RetryPolicy
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.workflow import Workflow, WorkflowRule
from workflow_analyzer.main import app
from workflow_analyzer.repositories.base import IssueRepository, WorkflowRepository
from workflow_analyzer.repositories.cache_aside import CacheAside
from workflow_analyzer.repositories.cache_repo import InMemoryCacheRepository
from workflow_analyzer.services.analysis_service import WorkflowAnalyzer
from workflow_analyzer.youtrack.api_service import YouTrackApiService

YOUTRACK_URL = "https://youtrack.example.com"


@pytest.fixture
def youtrack_url() -> str:
    return YOUTRACK_URL


@pytest.fixture
def no_delay_retry() -> RetryPolicy:
    """Retry policy with the default attempt count and no waiting."""
    return RetryPolicy(max_attempts=3, delay=0)


@pytest.fixture
def sample_issue() -> Issue:
    """DEMO-42: open and unassigned."""
    return Issue(
        id="DEMO-42",
        project_id="DEMO",
        summary="Login button does nothing",
        state="Open",
        priority="Major",
        type="Bug",
    )


@pytest.fixture
def assignee_rule() -> WorkflowRule:
    return WorkflowRule(
        id="rule-1",
        name="Require Assignee for In Progress",
        type=RuleType.STATE_MACHINE,
        guard="issue.fields.Assignee != null",
        message="Set an assignee before starting work",
    )


@pytest.fixture
def notify_rule() -> WorkflowRule:
    return WorkflowRule(
        id="rule-2",
        name="Notify reporter",
        type=RuleType.ON_CHANGE,
        action="notifyReporter(issue)",
    )


@pytest.fixture
def sample_rules(assignee_rule: WorkflowRule, notify_rule: WorkflowRule) -> list[WorkflowRule]:
    return [assignee_rule, notify_rule]


@pytest.fixture
def sample_workflows() -> list[Workflow]:
    return [
        Workflow(id="wf-1", name="Lifecycle", projects=["DEMO"]),
        Workflow(id="wf-2", name="Notifications", projects=["DEMO"]),
    ]


@pytest.fixture
def memory_cache() -> InMemoryCacheRepository:
    return InMemoryCacheRepository()


@pytest.fixture
def cache_aside(memory_cache: InMemoryCacheRepository) -> CacheAside:
    return CacheAside(memory_cache)


@pytest.fixture
def mock_issue_repository(sample_issue: Issue) -> AsyncMock:
    repository = AsyncMock(spec=IssueRepository)
    repository.get_issue.return_value = sample_issue
    return repository


@pytest.fixture
def mock_workflow_repository(sample_rules: list[WorkflowRule]) -> AsyncMock:
    repository = AsyncMock(spec=WorkflowRepository)
    repository.get_project_rules.return_value = sample_rules
    return repository


@pytest.fixture
def mock_completion_client() -> AsyncMock:
    client = AsyncMock()
    client.complete.return_value = (
        '{"explanation": "The issue has no assignee.", '
        '"suggestion": "Assign the issue before moving it to In Progress", '
        '"blockedByRules": ["Require Assignee"]}'
    )
    return client


@pytest.fixture
def analyzer(
    mock_issue_repository: AsyncMock,
    mock_workflow_repository: AsyncMock,
    mock_completion_client: AsyncMock,
) -> WorkflowAnalyzer:
    return WorkflowAnalyzer(
        issue_repository=mock_issue_repository,
        workflow_repository=mock_workflow_repository,
        completion_client=mock_completion_client,
        youtrack_base_url=YOUTRACK_URL,
    )


@pytest.fixture
def mock_youtrack_api() -> AsyncMock:
    api = AsyncMock(spec=YouTrackApiService)
    api.test_connection.return_value = True
    return api


@pytest.fixture
async def async_client(
    analyzer: WorkflowAnalyzer,
    mock_issue_repository: AsyncMock,
    mock_workflow_repository: AsyncMock,
    memory_cache: InMemoryCacheRepository,
    mock_youtrack_api: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app with all services replaced."""
    overrides: dict[Any, Any] = {
        get_analyzer: lambda: analyzer,
        get_issue_repository: lambda: mock_issue_repository,
        get_workflow_repository: lambda: mock_workflow_repository,
        get_cache_store: lambda: memory_cache,
        get_youtrack_api: lambda: mock_youtrack_api,
    }
    app.dependency_overrides.update(overrides)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def _issue_json(**overrides: Any) -> dict[str, Any]:
    """YouTrack REST representation of DEMO-42."""
    data: dict[str, Any] = {
        "$type": "Issue",
        "id": "2-42",
        "idReadable": "DEMO-42",
        "summary": "Login button does nothing",
        "created": 1700000000000,
        "updated": 1700003600000,
        "resolved": None,
        "reporter": {"id": "1-1", "login": "jane"},
        "project": {"id": "0-1", "name": "Demo", "shortName": "DEMO"},
        "fields": [
            {"name": "State", "value": {"name": "Open"}},
            {"name": "Assignee", "value": None},
            {"name": "Priority", "value": {"name": "Major"}},
            {"name": "Type", "value": {"name": "Bug"}},
        ],
        "tags": [{"id": "t-1", "name": "ui"}],
    }
    data.update(overrides)
    return data


@pytest.fixture
def issue_json() -> Any:
    """Factory for YouTrack issue payloads; keyword arguments replace top-level keys."""
    return _issue_json
