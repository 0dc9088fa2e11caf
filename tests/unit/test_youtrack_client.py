"""
Unit tests for the YouTrack HTTP client and API service.
"""

from typing import Any, Callable

import httpx
import pytest

from workflow_analyzer.core.constants import RuleType
from workflow_analyzer.core.exceptions import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnknownError,
    ValidationError,
)
from workflow_analyzer.youtrack.api_service import YouTrackApiService
from workflow_analyzer.youtrack.client import YouTrackClient

BASE_URL = "https://youtrack.example.com"


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> YouTrackClient:
    return YouTrackClient(BASE_URL, token="perm:secret", transport=httpx.MockTransport(handler))


class TestResponseClassification:
    """Tests for status code classification."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (400, ValidationError),
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, ServerError),
            (502, ServerError),
            (503, ServerError),
            (504, ServerError),
            (418, UnknownError),
        ],
    )
    async def test_error_statuses(self, status: int, expected: type[Exception]) -> None:
        client = make_client(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(expected):
            await client.get("/api/issues/DEMO-1")

    @pytest.mark.asyncio
    async def test_json_body(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"id": "DEMO-1"}))

        assert await client.get("/api/issues/DEMO-1") == {"id": "DEMO-1"}

    @pytest.mark.asyncio
    async def test_no_content(self) -> None:
        client = make_client(lambda request: httpx.Response(204))

        assert await client.get("/api/issues/DEMO-1") is None

    @pytest.mark.asyncio
    async def test_non_json_success_body(self) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>login</html>"))

        with pytest.raises(ValidationError) as exc_info:
            await client.get("/api/issues/DEMO-1")

        assert exc_info.value.field == "response"

    @pytest.mark.asyncio
    async def test_not_found_names_the_path(self) -> None:
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(NotFoundError) as exc_info:
            await client.get("/api/issues/DEMO-999")

        assert exc_info.value.resource == "/api/issues/DEMO-999"

    @pytest.mark.asyncio
    async def test_rate_limit_reads_retry_after(self) -> None:
        client = make_client(lambda request: httpx.Response(429, headers={"Retry-After": "30"}))

        with pytest.raises(RateLimitError) as exc_info:
            await client.get("/api/issues")

        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_rate_limit_default_retry_after(self) -> None:
        client = make_client(lambda request: httpx.Response(429))

        with pytest.raises(RateLimitError) as exc_info:
            await client.get("/api/issues")

        assert exc_info.value.retry_after == 60

    @pytest.mark.asyncio
    async def test_server_error_keeps_upstream_status(self) -> None:
        client = make_client(lambda request: httpx.Response(503, text="maintenance"))

        with pytest.raises(ServerError) as exc_info:
            await client.get("/api/issues")

        assert exc_info.value.upstream_status == 503
        assert exc_info.value.message == "maintenance"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(NetworkError):
            await client.get("/api/issues")

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.get("/api/users/me")

        assert seen["authorization"] == "Bearer perm:secret"


class TestYouTrackApiService:
    """Tests for typed tracker operations."""

    @pytest.mark.asyncio
    async def test_get_issue(self, issue_json: Any) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["fields"] = request.url.params.get("fields")
            return httpx.Response(200, json=issue_json())

        service = YouTrackApiService(make_client(handler))
        issue = await service.get_issue("DEMO-42")

        assert seen["path"] == "/api/issues/DEMO-42"
        assert "idReadable" in seen["fields"]
        assert issue.id == "DEMO-42"
        assert issue.project_id == "DEMO"
        assert issue.state == "Open"

    @pytest.mark.asyncio
    async def test_search_issues_paging(self, issue_json: Any) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=[issue_json(), issue_json(idReadable="DEMO-43")])

        service = YouTrackApiService(make_client(handler))
        issues = await service.search_issues("project: DEMO", limit=2, offset=4)

        assert [issue.id for issue in issues] == ["DEMO-42", "DEMO-43"]
        assert seen["query"] == "project: DEMO"
        assert seen["$top"] == "2"
        assert seen["$skip"] == "4"

    @pytest.mark.asyncio
    async def test_project_workflows_and_rules_use_admin_api(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path.endswith("/rules"):
                return httpx.Response(200, json=[{"id": "r-1", "name": "Require Assignee", "ruleType": "StateMachine"}])
            return httpx.Response(200, json=[{"id": "wf-1", "name": "Lifecycle"}])

        service = YouTrackApiService(make_client(handler))
        workflows = await service.get_project_workflows("DEMO")
        rules = await service.get_workflow_rules("wf-1")

        assert paths == ["/api/admin/projects/DEMO/workflows", "/api/admin/workflows/wf-1/rules"]
        assert [workflow.id for workflow in workflows] == ["wf-1"]
        assert rules[0].type is RuleType.STATE_MACHINE

    @pytest.mark.asyncio
    async def test_connection_check(self) -> None:
        ok = YouTrackApiService(make_client(lambda request: httpx.Response(200, json={"id": "1-1"})))
        denied = YouTrackApiService(make_client(lambda request: httpx.Response(401)))

        assert await ok.test_connection() is True
        assert await denied.test_connection() is False

    @pytest.mark.asyncio
    async def test_get_issues_builds_id_disjunction(self, issue_json: Any) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=[issue_json(), issue_json(idReadable="DEMO-43")])

        service = YouTrackApiService(make_client(handler))
        issues = await service.get_issues(["DEMO-42", "DEMO-43"])

        assert [issue.id for issue in issues] == ["DEMO-42", "DEMO-43"]
        assert seen["query"] == "id: DEMO-42 or id: DEMO-43"
        assert seen["$top"] == "2"

    @pytest.mark.asyncio
    async def test_project_issues_query(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=[])

        service = YouTrackApiService(make_client(handler))
        await service.get_project_issues("DEMO", state="Open", assignee="jane", limit=10, offset=30)

        assert seen["query"] == "project: DEMO and state: Open and assignee: jane"
        assert seen["$top"] == "10"
        assert seen["$skip"] == "30"

    @pytest.mark.asyncio
    async def test_issue_activities(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen.update(request.url.params)
            return httpx.Response(
                200,
                json={
                    "activities": [
                        {
                            "id": "act-1",
                            "timestamp": 1700000000000,
                            "author": {"login": "jane"},
                            "field": {"presentation": "State"},
                            "added": [{"name": "Fixed"}],
                            "removed": [{"name": "Open"}],
                            "category": "CustomFieldCategory",
                        }
                    ],
                    "hasAfter": True,
                    "afterCursor": "c-2",
                },
            )

        service = YouTrackApiService(make_client(handler))
        page = await service.get_issue_activities(
            "DEMO-42", categories=["CustomFieldCategory", "CommentsCategory"], limit=20, cursor="c-1"
        )

        assert seen["path"] == "/api/issues/DEMO-42/activities"
        assert seen["categories"] == "CustomFieldCategory,CommentsCategory"
        assert seen["$top"] == "20"
        assert seen["cursor"] == "c-1"
        assert "targetMember" in seen["fields"]
        assert page.activities[0].new_value == "Fixed"
        assert page.next_cursor == "c-2"

    @pytest.mark.asyncio
    async def test_issue_activities_without_filters(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"activities": []})

        service = YouTrackApiService(make_client(handler))
        page = await service.get_issue_activities("DEMO-42")

        assert "categories" not in seen
        assert "cursor" not in seen
        assert page.activities == []
        assert not page.has_more

    @pytest.mark.asyncio
    async def test_projects_use_admin_api(self) -> None:
        requests: list[httpx.Request] = []
        project = {"id": "0-1", "shortName": "DEMO", "name": "Demo"}

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("/projects"):
                return httpx.Response(200, json=[project])
            return httpx.Response(200, json=project)

        service = YouTrackApiService(make_client(handler))
        projects = await service.get_projects()
        archived = await service.get_projects(archived=True, limit=5, offset=5)
        single = await service.get_project("DEMO")

        assert [p.short_name for p in projects] == ["DEMO"]
        assert len(archived) == 1
        assert single.name == "Demo"
        assert [r.url.path for r in requests] == [
            "/api/admin/projects",
            "/api/admin/projects",
            "/api/admin/projects/DEMO",
        ]
        assert requests[0].url.params["query"] == "archived: false"
        assert requests[1].url.params["query"] == ""
        assert requests[1].url.params["$skip"] == "5"
        assert "shortName" in requests[2].url.params["fields"]
