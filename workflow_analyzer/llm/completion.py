"""
Completion client: prompt string in, response text out.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from workflow_analyzer.core.exceptions import CompletionError
from workflow_analyzer.core.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are a YouTrack workflow analyzer. When given an error description and workflow rules:
1. Identify what the user tried to do
2. Explain why it failed based on the workflow rules provided
3. Suggest how to fix it
4. Identify which specific rules blocked the action

Respond in JSON format."""


class CompletionClient(Protocol):
    """Anything that can turn a prompt into a completion."""

    async def complete(self, prompt: str) -> str:
        ...


class OpenAIChatCompletionClient:
    """
    Client for an OpenAI-compatible ``/chat/completions`` endpoint.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.7,
        max_tokens: int = 1500,
        timeout: int = 60,
        system_prompt: str = SYSTEM_PROMPT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.system_prompt = system_prompt
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info("Completion client initialized", model=model)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def complete(self, prompt: str) -> str:
        """
        Send ``prompt`` as the user message and return the first choice's text.

        Raises:
            CompletionError: On transport failure, non-2xx status or a
                response without message content
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        client = await self._get_client()

        try:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Completion request failed",
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            raise CompletionError(
                f"HTTP {e.response.status_code}: {e.response.text}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("Completion request error", error=str(e))
            raise CompletionError(f"Request failed: {e}") from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError(f"Malformed completion response: {e}") from e

        if content is None:
            raise CompletionError("Completion response has no content")

        usage = data.get("usage") or {}
        logger.debug("Received completion", tokens_used=usage.get("total_tokens", 0))
        return content
