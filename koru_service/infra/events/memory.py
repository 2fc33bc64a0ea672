"""In-process event bus backed by an asyncio queue.

Single process only: ids published by the request path are consumed by the
worker task running on the same event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING

from koru_service.core.events.bus import PublishError

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.core.events.bus import EventProcessor
    from koru_service.infra.events.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    def __init__(self, maxsize: int = 0) -> None:
        self.queue: asyncio.Queue[UUID] = asyncio.Queue(maxsize)

    async def publish(self, event_ids: Sequence[UUID]) -> None:
        try:
            for event_id in event_ids:
                self.queue.put_nowait(event_id)
        except asyncio.QueueFull as e:
            raise PublishError("Event queue is full", event_ids) from e

    async def close(self) -> None:
        return None


class InMemoryEventListener:
    def __init__(self, bus: InMemoryEventBus, dispatcher: EventDispatcher) -> None:
        self.bus = bus
        self.dispatcher = dispatcher

    def register(self, processor: EventProcessor) -> None:
        self.dispatcher.register(processor)

    async def listen(self) -> None:
        self.dispatcher.start()
        logger.info("Listening for events on the in-process queue")
        while True:
            event_id = await self.bus.queue.get()
            try:
                await self.dispatcher.dispatch(event_id)
            finally:
                self.bus.queue.task_done()
