"""Tests for event delivery: fetch retry, processor isolation and completion."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from koru_service.core.events.bus import EventHandlerError
from koru_service.core.events.models import UserCreated, UserEvent
from koru_service.core.store.exceptions import CorruptedDataError
from koru_service.infra.events import EventDispatcher, InMemoryEventBus, InMemoryEventListener
from koru_service.infra.store.memory import InMemoryStore


class RecordingProcessor:
    def __init__(self, error: Exception | None = None) -> None:
        self.handled: list = []
        self.error = error

    async def handle(self, event) -> None:
        self.handled.append(event)
        if self.error is not None:
            raise self.error


async def _commit(store: InMemoryStore, event: UserEvent) -> None:
    async with store.transaction() as tx:
        await store.events.save(tx, [event])
        await store.commit(tx)


def _event() -> UserEvent:
    return UserEvent(user_id=uuid4(), kind=UserCreated(name="Alice", email="alice@koru.test"))


def _dispatcher(store: InMemoryStore, **kwargs) -> EventDispatcher:
    kwargs.setdefault("fetch_max_attempts", 3)
    kwargs.setdefault("fetch_initial_delay", 0.001)
    return EventDispatcher(store.events, **kwargs)


@pytest.mark.unit
class TestDispatch:
    @pytest.mark.asyncio
    async def test_processors_run_in_order_then_event_is_marked(self):
        store = InMemoryStore()
        event = _event()
        await _commit(store, event)
        calls: list[str] = []
        first, second = AsyncMock(), AsyncMock()
        first.handle.side_effect = lambda e: calls.append("first")
        second.handle.side_effect = lambda e: calls.append("second")
        dispatcher = _dispatcher(store)
        dispatcher.register(first)
        dispatcher.register(second)

        assert await dispatcher.dispatch(event.id)

        assert calls == ["first", "second"]
        first.handle.assert_awaited_once_with(event)
        assert await store.events.processed_at(event.id) is not None

    @pytest.mark.asyncio
    async def test_failing_processor_does_not_block_others(self, caplog: pytest.LogCaptureFixture):
        store = InMemoryStore()
        event = _event()
        await _commit(store, event)
        failing = RecordingProcessor(EventHandlerError("push failed", event.id))
        healthy = RecordingProcessor()
        dispatcher = _dispatcher(store)
        dispatcher.register(failing)
        dispatcher.register(healthy)

        with caplog.at_level(logging.ERROR):
            assert await dispatcher.dispatch(event.id)

        assert healthy.handled == [event]
        assert "Event processor failed" in caplog.text
        assert await store.events.processed_at(event.id) is not None

    @pytest.mark.asyncio
    async def test_event_without_processors_is_marked(self):
        store = InMemoryStore()
        event = _event()
        await _commit(store, event)

        assert await _dispatcher(store).dispatch(event.id)

        assert await store.events.processed_at(event.id) is not None

    @pytest.mark.asyncio
    async def test_id_announced_before_commit_is_retried(self):
        store = InMemoryStore()
        event = _event()
        processor = RecordingProcessor()
        dispatcher = _dispatcher(store, fetch_max_attempts=10, fetch_initial_delay=0.01)
        dispatcher.register(processor)

        delivery = asyncio.create_task(dispatcher.dispatch(event.id))
        await asyncio.sleep(0.02)
        await _commit(store, event)

        assert await delivery
        assert processor.handled == [event]

    @pytest.mark.asyncio
    async def test_never_visible_event_is_skipped(self, caplog: pytest.LogCaptureFixture):
        store = InMemoryStore()
        processor = RecordingProcessor()
        dispatcher = _dispatcher(store)
        dispatcher.register(processor)

        with caplog.at_level(logging.WARNING):
            assert not await dispatcher.dispatch(uuid4())

        assert processor.handled == []
        assert "not visible" in caplog.text

    @pytest.mark.asyncio
    async def test_corrupted_log_is_skipped(self):
        events = AsyncMock()
        events.find.side_effect = CorruptedDataError("Stored event cannot be decoded")
        processor = RecordingProcessor()
        dispatcher = EventDispatcher(events)
        dispatcher.register(processor)

        assert not await dispatcher.dispatch(uuid4())

        assert processor.handled == []
        events.mark_processed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mark_failure_is_logged_not_raised(self, caplog: pytest.LogCaptureFixture):
        store = InMemoryStore()
        event = _event()
        await _commit(store, event)
        dispatcher = _dispatcher(store)
        dispatcher.register(RecordingProcessor())
        original = store.events.mark_processed

        async def crash(event_id):
            store.events.crashed = True
            await original(event_id)

        store.events.mark_processed = crash

        with caplog.at_level(logging.ERROR):
            assert await dispatcher.dispatch(event.id)
        assert "Failed to mark event processed" in caplog.text

    def test_register_after_start_is_rejected(self):
        dispatcher = _dispatcher(InMemoryStore())
        dispatcher.start()

        with pytest.raises(RuntimeError):
            dispatcher.register(RecordingProcessor())


@pytest.mark.unit
class TestListenLoop:
    @pytest.mark.asyncio
    async def test_processor_failure_does_not_stop_later_deliveries(self):
        store = InMemoryStore()
        first, second = _event(), _event()
        await _commit(store, first)
        await _commit(store, second)
        bus = InMemoryEventBus()
        failing = RecordingProcessor(RuntimeError("push failed"))
        healthy = RecordingProcessor()
        listener = InMemoryEventListener(bus, _dispatcher(store))
        listener.register(failing)
        listener.register(healthy)

        task = asyncio.create_task(listener.listen())
        try:
            await bus.publish([first.id])
            await bus.publish([second.id])
            await asyncio.wait_for(bus.queue.join(), timeout=1)
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        assert failing.handled == [first, second]
        assert healthy.handled == [first, second]
        assert await store.events.processed_at(first.id) is not None
        assert await store.events.processed_at(second.id) is not None
