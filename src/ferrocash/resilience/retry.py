"""
Retry Strategies using Tenacity.

Retry policy for outbound HTTP deliveries.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ferrocash.core.logging import get_logger

logger = get_logger("retry")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient network/infrastructure error."""
    if isinstance(exception, httpx.TransportError):
        return True
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


def delivery_retrying(
    attempts: int = 3,
    multiplier: float = 0.5,
    max_wait: float = 4.0,
) -> AsyncRetrying:
    """
    Build the standard delivery retry controller.

    Exponential backoff, transient errors only, last exception re-raised.
    """
    return AsyncRetrying(
        retry=retry_if_exception(is_transient_error),
        wait=wait_exponential(multiplier=multiplier, max=max_wait),
        stop=stop_after_attempt(attempts),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Retrying delivery... (Attempt {retry_state.attempt_number})"
        ),
    )


async def execute_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    retrying: AsyncRetrying | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async function with the delivery retry policy."""
    async for attempt in retrying or delivery_retrying():
        with attempt:
            return await func(*args, **kwargs)
