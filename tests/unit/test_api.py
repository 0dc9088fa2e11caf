"""
Unit tests for the HTTP API.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from workflow_analyzer.core.exceptions import NotFoundError
from workflow_analyzer.repositories.cache_repo import InMemoryCacheRepository


class TestAnalyzeEndpoint:
    """Tests for POST /api/v1/analyze."""

    @pytest.mark.asyncio
    async def test_analyze(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/v1/analyze",
            json={"errorMessage": "Cannot move to In Progress", "issueId": "DEMO-42"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["explanation"] == "The issue has no assignee."
        assert data["suggestedActions"] == ["Assign the issue before moving it to In Progress"]
        assert data["workflowRules"] == [
            {
                "name": "Require Assignee for In Progress",
                "description": "issue.fields.Assignee != null",
                "ruleUrl": "https://youtrack.example.com/admin/workflows/rules/rule-1",
            }
        ]

    @pytest.mark.asyncio
    async def test_blank_message_is_bad_request(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/v1/analyze", json={"errorMessage": "  "})
        assert response.status_code == 400

        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Description required"
        assert error["details"] == {"field": "description"}

    @pytest.mark.asyncio
    async def test_missing_message_is_bad_request(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/v1/analyze", json={"issueId": "DEMO-42"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_issue_is_not_found(
        self,
        async_client: AsyncClient,
        mock_issue_repository: AsyncMock,
    ) -> None:
        mock_issue_repository.get_issue.side_effect = NotFoundError("/api/issues/DEMO-999")

        response = await async_client.post(
            "/api/v1/analyze",
            json={"errorMessage": "Cannot close", "issueId": "DEMO-999"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Issue DEMO-999 not found"

    @pytest.mark.asyncio
    async def test_analysis_failure_is_server_error(
        self,
        async_client: AsyncClient,
        mock_completion_client: AsyncMock,
    ) -> None:
        mock_completion_client.complete.side_effect = RuntimeError("provider exploded")

        response = await async_client.post("/api/v1/analyze", json={"errorMessage": "Cannot close"})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "ANALYSIS_FAILED"


class TestHealthEndpoints:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_liveness_check(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/health/live")

        assert response.json() == {"status": "alive"}

    @pytest.mark.asyncio
    async def test_readiness_check(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/health/ready")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"app": True, "cache": True, "youtrack": True}

    @pytest.mark.asyncio
    async def test_not_ready_when_youtrack_unreachable(
        self,
        async_client: AsyncClient,
        mock_youtrack_api: AsyncMock,
    ) -> None:
        mock_youtrack_api.test_connection.return_value = False

        data = (await async_client.get("/api/v1/health/ready")).json()

        assert data["status"] == "not_ready"
        assert data["checks"]["youtrack"] is False

    @pytest.mark.asyncio
    async def test_root_endpoint(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "name" in data
        assert "version" in data


class TestCacheEndpoints:
    """Tests for cache inspection and invalidation."""

    @pytest.mark.asyncio
    async def test_stats(self, async_client: AsyncClient, memory_cache: InMemoryCacheRepository) -> None:
        await memory_cache.set_with_ttl("issue:DEMO-42", "{}", timedelta(minutes=5))

        data = (await async_client.get("/api/v1/cache/stats")).json()

        assert data["store"] == "InMemoryCacheRepository"
        assert data["size"] == 1

    @pytest.mark.asyncio
    async def test_invalidate_issue(self, async_client: AsyncClient, mock_issue_repository: AsyncMock) -> None:
        response = await async_client.delete("/api/v1/cache/issues/DEMO-42")

        assert response.status_code == 200
        mock_issue_repository.invalidate_cache.assert_awaited_once_with("DEMO-42")

    @pytest.mark.asyncio
    async def test_invalidate_project(
        self,
        async_client: AsyncClient,
        mock_issue_repository: AsyncMock,
        mock_workflow_repository: AsyncMock,
    ) -> None:
        response = await async_client.delete("/api/v1/cache/projects/DEMO")

        assert response.status_code == 200
        mock_issue_repository.invalidate_project_cache.assert_awaited_once_with("DEMO")
        mock_workflow_repository.invalidate_project_cache.assert_awaited_once_with("DEMO")
