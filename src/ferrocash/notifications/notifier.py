"""
Change notifier.

Services call ``notify`` after a mutation has been persisted. Delivery runs
in background tasks so a slow or failing sink never affects the mutation.
"""

from __future__ import annotations

import asyncio
from typing import Any

from ferrocash.core.events import ChangeEvent, EntityType
from ferrocash.core.logging import get_logger
from ferrocash.notifications.sinks import NotificationSink

logger = get_logger("notifications")


class ChangeNotifier:
    """Broadcasts ChangeEvents to every registered sink."""

    def __init__(self, sinks: list[NotificationSink] | None = None) -> None:
        self._sinks: list[NotificationSink] = list(sinks or [])
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def sinks(self) -> list[NotificationSink]:
        return list(self._sinks)

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    def notify(self, entity_type: EntityType, **data: Any) -> ChangeEvent:
        """
        Publish a change event. Never raises.

        Args:
            entity_type: Which channel changed
            **data: Optional ids of what changed

        Returns:
            The event that was scheduled for delivery
        """
        event = ChangeEvent(entity_type=entity_type, data=data)
        if not self._sinks:
            return event

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropped {entity_type.value} event")
            return event

        for sink in self._sinks:
            task = loop.create_task(self._deliver(sink, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return event

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        for sink in self._sinks:
            await sink.close()

    async def _deliver(self, sink: NotificationSink, event: ChangeEvent) -> None:
        try:
            await sink.deliver(event)
        except Exception as e:
            logger.error(f"{type(sink).__name__} failed to deliver {event.entity_type.value} event: {e}")
