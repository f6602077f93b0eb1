"""
Delivery targets for change events.

SubscriberHub fans events out to in-process subscribers (the websocket route
uses it). WebhookSink POSTs each event to an external URL.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx

from ferrocash.core.logging import get_logger
from ferrocash.resilience.circuit import CircuitBreaker, CircuitOpenError
from ferrocash.resilience.retry import delivery_retrying, execute_with_retry

if TYPE_CHECKING:
    from ferrocash.core.events import ChangeEvent
    from ferrocash.storage.base import StorageBackend

logger = get_logger("notifications")


class NotificationSink(ABC):
    """Something that receives change events."""

    @abstractmethod
    async def deliver(self, event: ChangeEvent) -> None:
        """Deliver one event. May raise; the notifier logs and moves on."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources held by the sink."""
        pass


class SubscriberHub(NotificationSink):
    """
    In-process pub/sub.

    Each subscriber gets its own bounded queue. A subscriber that falls
    behind loses its oldest events rather than blocking the publisher.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._max_queue_size = max_queue_size
        self._subscribers: set[asyncio.Queue[ChangeEvent]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[ChangeEvent]:
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ChangeEvent]) -> None:
        self._subscribers.discard(queue)

    @asynccontextmanager
    async def subscription(self) -> AsyncIterator[asyncio.Queue[ChangeEvent]]:
        queue = self.subscribe()
        try:
            yield queue
        finally:
            self.unsubscribe(queue)

    async def deliver(self, event: ChangeEvent) -> None:
        for queue in list(self._subscribers):
            if queue.full():
                queue.get_nowait()
                logger.warning("Subscriber queue full, dropped oldest event")
            queue.put_nowait(event)


class WebhookSink(NotificationSink):
    """
    POSTs events as JSON to a webhook URL.

    Transient failures are retried with backoff; repeated failures trip a
    circuit breaker so a dead endpoint is skipped until it recovers.
    """

    def __init__(
        self,
        url: str,
        storage: StorageBackend,
        timeout: float = 5.0,
        retry_attempts: int = 3,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize webhook sink.

        Args:
            url: Target URL
            storage: Backend holding circuit breaker state
            timeout: Per-request timeout in seconds
            retry_attempts: Attempts per event before giving up
            client: Optional pre-built HTTP client (tests pass a mock transport)
        """
        self.url = url
        self._retry_attempts = retry_attempts
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._circuit = CircuitBreaker("webhook", storage)

    async def deliver(self, event: ChangeEvent) -> None:
        try:
            async with self._circuit:
                await execute_with_retry(
                    self._post,
                    event.to_dict(),
                    retrying=delivery_retrying(attempts=self._retry_attempts),
                )
        except CircuitOpenError:
            logger.warning(f"Webhook circuit open, skipped {event.entity_type.value} event")

    async def _post(self, payload: dict) -> None:
        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()

    async def close(self) -> None:
        await self._client.aclose()
