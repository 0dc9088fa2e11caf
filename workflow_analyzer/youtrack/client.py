"""
Thin async HTTP client for the YouTrack REST API.
Retry is applied by the repositories, not here.
"""

from typing import Any, Optional

import httpx

from workflow_analyzer.core.constants import DEFAULT_RATE_LIMIT_RETRY_AFTER
from workflow_analyzer.core.exceptions import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnknownError,
    ValidationError,
)
from workflow_analyzer.core.logging import get_logger

logger = get_logger(__name__)

_SERVER_ERROR_STATUSES = {500, 502, 503, 504}


def _body_text(response: httpx.Response, default: str) -> str:
    text = response.text
    return text if text else default


def handle_response(response: httpx.Response) -> Any:
    """
    Turn a YouTrack response into parsed JSON or a classified error.

    Raises:
        AuthenticationError: 401 / 403
        NotFoundError: 404
        RateLimitError: 429
        ValidationError: 400, or a 2xx body that is not JSON
        ServerError: 500 / 502 / 503 / 504
        UnknownError: any other status
    """
    status = response.status_code

    if status == 204:
        return None

    if 200 <= status < 300:
        try:
            return response.json()
        except ValueError as e:
            logger.error("Failed to deserialize response", body=response.text[:500])
            raise ValidationError("response", f"Failed to parse response: {e}") from e

    if status == 401:
        logger.error("Authentication failed", status_code=status)
        raise AuthenticationError("Invalid or expired authentication token")

    if status == 403:
        logger.error("Access forbidden", status_code=status)
        raise AuthenticationError("Access denied to the requested resource")

    if status == 404:
        path = response.request.url.path
        logger.warning("Resource not found", path=path)
        raise NotFoundError(path)

    if status == 429:
        header = response.headers.get("Retry-After", "")
        retry_after = int(header) if header.isdigit() else DEFAULT_RATE_LIMIT_RETRY_AFTER
        logger.warning("Rate limit exceeded", retry_after=retry_after)
        raise RateLimitError(retry_after)

    if status == 400:
        message = _body_text(response, "Bad request")
        logger.error("Bad request", error=message)
        raise ValidationError("request", message)

    if status in _SERVER_ERROR_STATUSES:
        message = _body_text(response, f"Server error: {status}")
        logger.error("Server error", status_code=status, error=message)
        raise ServerError(message, status)

    message = _body_text(response, f"Unexpected status: {status}")
    logger.error("Unexpected response", status_code=status, error=message)
    raise UnknownError(f"Unexpected response status: {status} - {message}")


class YouTrackClient:
    """
    Async HTTP client bound to one YouTrack instance.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: YouTrack instance URL
            token: Permanent token used for bearer authentication
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        Execute a GET request.

        Returns:
            Parsed JSON body

        Raises:
            NetworkError: If the request could not be sent or answered
        """
        logger.debug("GET request", path=path, params=params)
        client = await self._get_client()

        try:
            response = await client.get(path, params=params)
        except httpx.RequestError as e:
            logger.error("YouTrack request error", path=path, error=str(e))
            raise NetworkError(f"Failed to execute GET request to {path}: {e}") from e

        return handle_response(response)

    async def __aenter__(self) -> "YouTrackClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
