"""Tests for the in-process and Redis transports."""

from __future__ import annotations

import asyncio
import contextlib
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from koru_service.core.events.bus import EventBus, EventListener, PublishError
from koru_service.core.events.models import UserCreated, UserEvent
from koru_service.core.settings import EventBusSettings
from koru_service.infra.events import (
    EventDispatcher,
    InMemoryEventBus,
    InMemoryEventListener,
    RedisEventBus,
    RedisEventListener,
    build_event_transport,
)
from koru_service.infra.events.redis import parse_event_id
from koru_service.infra.store.memory import InMemoryStore


class RecordingProcessor:
    def __init__(self) -> None:
        self.handled: list = []
        self.seen = asyncio.Event()

    async def handle(self, event) -> None:
        self.handled.append(event)
        self.seen.set()


async def _committed_event(store: InMemoryStore) -> UserEvent:
    event = UserEvent(user_id=uuid4(), kind=UserCreated(name="Alice", email="alice@koru.test"))
    async with store.transaction() as tx:
        await store.events.save(tx, [event])
        await store.commit(tx)
    return event


@pytest.mark.unit
class TestInMemoryTransport:
    @pytest.mark.asyncio
    async def test_published_id_reaches_processor(self):
        store = InMemoryStore()
        bus = InMemoryEventBus()
        listener = InMemoryEventListener(bus, EventDispatcher(store.events))
        processor = RecordingProcessor()
        listener.register(processor)
        event = await _committed_event(store)

        task = asyncio.create_task(listener.listen())
        try:
            await bus.publish([event.id])
            await asyncio.wait_for(bus.queue.join(), timeout=1)
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        assert processor.handled == [event]
        assert await store.events.processed_at(event.id) is not None

    @pytest.mark.asyncio
    async def test_full_queue_fails_publish(self):
        bus = InMemoryEventBus(maxsize=1)
        ids = [uuid4(), uuid4()]

        with pytest.raises(PublishError) as exc_info:
            await bus.publish(ids)

        assert exc_info.value.event_ids == ids

    def test_implements_bus_contracts(self):
        bus = InMemoryEventBus()
        assert isinstance(bus, EventBus)
        assert isinstance(InMemoryEventListener(bus, EventDispatcher(InMemoryStore().events)), EventListener)


class FakePubSub:
    """Stands in for redis.asyncio.client.PubSub."""

    def __init__(self, messages: list[dict]) -> None:
        self.messages = messages
        self.subscribe = AsyncMock()
        self.aclose = AsyncMock()

    async def listen(self):
        for message in self.messages:
            yield message


@pytest.mark.unit
class TestRedisTransport:
    @pytest.mark.asyncio
    async def test_publishes_one_message_per_id(self):
        client = AsyncMock()
        bus = RedisEventBus(client, "koru-events")
        ids = [uuid4(), uuid4()]

        await bus.publish(ids)

        assert [c.args for c in client.publish.await_args_list] == [
            ("koru-events", str(ids[0])),
            ("koru-events", str(ids[1])),
        ]

    @pytest.mark.asyncio
    async def test_redis_failure_becomes_publish_error(self):
        client = AsyncMock()
        client.publish.side_effect = RedisConnectionError("down")
        bus = RedisEventBus(client, "koru-events")

        with pytest.raises(PublishError):
            await bus.publish([uuid4()])

    @pytest.mark.asyncio
    async def test_listener_dispatches_valid_ids_only(self):
        store = InMemoryStore()
        event = await _committed_event(store)
        pubsub = FakePubSub([
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": b"not-a-uuid"},
            {"type": "message", "data": str(event.id).encode()},
        ])
        client = MagicMock()
        client.pubsub.return_value = pubsub
        listener = RedisEventListener(client, "koru-events", EventDispatcher(store.events))
        processor = RecordingProcessor()
        listener.register(processor)

        await listener.listen()

        pubsub.subscribe.assert_awaited_once_with("koru-events")
        pubsub.aclose.assert_awaited_once()
        assert processor.handled == [event]

    def test_parse_event_id(self):
        event_id = uuid4()
        assert parse_event_id(str(event_id).encode()) == event_id
        assert parse_event_id("garbage") is None


@pytest.mark.unit
class TestTransportFactory:
    def test_memory_backend(self):
        transport = build_event_transport(EventBusSettings(backend="memory"), InMemoryStore())
        assert isinstance(transport.bus, InMemoryEventBus)
        assert transport.listener.bus is transport.bus

    def test_redis_backend(self):
        settings = EventBusSettings(backend="redis", redis_url="redis://localhost:6379/0", channel="c")
        transport = build_event_transport(settings, InMemoryStore())
        assert isinstance(transport.bus, RedisEventBus)
        assert transport.listener.channel == "c"
