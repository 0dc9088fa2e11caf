"""
Fixed-delay retry policy wrapped around every tracker call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from workflow_analyzer.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry an async operation a bounded number of times.

    Every exception is retried the same way (a 404 exactly like a timeout);
    the last one is re-raised unchanged once attempts are exhausted.
    """

    max_attempts: int = 3
    delay: float = 1.0

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` until it succeeds or attempts run out."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_fixed(self.delay),
            before_sleep=self._log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await operation()
        raise RuntimeError("retry loop exited without a result")  # pragma: no cover

    def _log_retry(self, retry_state) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.debug(
            "Retrying tracker call",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            error=str(exc),
        )

