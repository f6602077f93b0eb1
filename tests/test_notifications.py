"""Tests for change notifications and sinks."""

import json

import httpx
import pytest

from ferrocash.client import FerroCash
from ferrocash.core.events import ChangeEvent, EntityType
from ferrocash.core.exceptions import NotFoundError
from ferrocash.notifications.notifier import ChangeNotifier
from ferrocash.notifications.sinks import NotificationSink, SubscriberHub, WebhookSink
from ferrocash.resilience.circuit import CircuitState
from ferrocash.storage.memory import InMemoryStorage


class RecordingSink(NotificationSink):
    def __init__(self):
        self.events: list[ChangeEvent] = []

    async def deliver(self, event: ChangeEvent) -> None:
        self.events.append(event)


class BrokenSink(NotificationSink):
    async def deliver(self, event: ChangeEvent) -> None:
        raise RuntimeError("sink down")


class TestChangeEvent:
    def test_to_dict(self):
        event = ChangeEvent(EntityType.CHECKS, data={"check_id": "chk-1"})
        data = event.to_dict()

        assert data["type"] == "checks"
        assert data["data"] == {"check_id": "chk-1"}
        assert data["timestamp"].endswith("+00:00")


class TestChangeNotifier:
    @pytest.mark.asyncio
    async def test_notify_delivers_to_every_sink(self):
        first, second = RecordingSink(), RecordingSink()
        notifier = ChangeNotifier([first, second])

        event = notifier.notify(EntityType.CASH_REGISTERS, register_id="reg-1")
        await notifier.drain()

        assert first.events == [event]
        assert second.events == [event]

    @pytest.mark.asyncio
    async def test_failing_sink_is_isolated(self):
        recorder = RecordingSink()
        notifier = ChangeNotifier([BrokenSink(), recorder])

        notifier.notify(EntityType.CHECKS)
        await notifier.drain()

        assert len(recorder.events) == 1

    def test_notify_without_loop_does_not_raise(self):
        notifier = ChangeNotifier([RecordingSink()])

        event = notifier.notify(EntityType.CHECKS)

        assert event.entity_type == EntityType.CHECKS

    @pytest.mark.asyncio
    async def test_writes_survive_broken_sinks(self, config, storage):
        cash = FerroCash(config=config, storage=storage, sinks=[BrokenSink()])

        register = await cash.registers.create_register("Counter")
        session = await cash.open_session(register.id, "10.00", "ana")
        await cash.notifier.drain()

        assert (await cash.get_current_session(register.id)).id == session.id

    @pytest.mark.asyncio
    async def test_services_publish_on_their_channel(self, config, storage, check_fields):
        recorder = RecordingSink()
        cash = FerroCash(config=config, storage=storage, sinks=[recorder])

        register = await cash.registers.create_register("Counter")
        session = await cash.open_session(register.id, "10.00", "ana")
        await cash.create_movement(session.id, register.id, "sale", "5.00", user_id="ana")
        await cash.close_session(session.id, "15.00", "ana")
        await cash.create_check(**check_fields)
        await cash.notifier.drain()

        assert [e.entity_type for e in recorder.events] == [
            EntityType.CASH_REGISTERS,
            EntityType.CASH_REGISTERS,
            EntityType.CASH_REGISTERS,
            EntityType.CASH_REGISTERS,
            EntityType.CHECKS,
        ]
        assert recorder.events[2].data["session_id"] == session.id

    @pytest.mark.asyncio
    async def test_failed_operation_publishes_nothing(self, config, storage):
        recorder = RecordingSink()
        cash = FerroCash(config=config, storage=storage, sinks=[recorder])

        with pytest.raises(NotFoundError):
            await cash.open_session("ghost", "10.00", "ana")
        await cash.notifier.drain()

        assert recorder.events == []


class TestSubscriberHub:
    @pytest.mark.asyncio
    async def test_subscription_receives_events(self):
        hub = SubscriberHub()
        event = ChangeEvent(EntityType.CHECKS)

        async with hub.subscription() as queue:
            assert hub.subscriber_count == 1
            await hub.deliver(event)
            assert queue.get_nowait() is event

        assert hub.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_slow_subscriber_drops_oldest(self):
        hub = SubscriberHub(max_queue_size=2)
        queue = hub.subscribe()
        events = [ChangeEvent(EntityType.CHECKS, data={"n": n}) for n in range(3)]

        for event in events:
            await hub.deliver(event)

        assert [queue.get_nowait().data["n"] for _ in range(queue.qsize())] == [1, 2]


class TestWebhookSink:
    @pytest.mark.asyncio
    async def test_posts_event_json(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(204)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sink = WebhookSink("https://hooks.example.com/cash", InMemoryStorage(), client=client)

        await sink.deliver(ChangeEvent(EntityType.CASH_REGISTERS, data={"register_id": "reg-1"}))
        await sink.close()

        assert received[0]["type"] == "cash-registers"
        assert received[0]["data"] == {"register_id": "reg-1"}

    @pytest.mark.asyncio
    async def test_dead_endpoint_trips_circuit(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400)

        storage = InMemoryStorage()
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sink = WebhookSink("https://hooks.example.com/cash", storage, retry_attempts=1, client=client)

        for _ in range(5):
            with pytest.raises(httpx.HTTPStatusError):
                await sink.deliver(ChangeEvent(EntityType.CHECKS))
        assert await sink._circuit.get_state() == CircuitState.OPEN

        # Skipped while open
        await sink.deliver(ChangeEvent(EntityType.CHECKS))
        assert len(calls) == 5
        await sink.close()
