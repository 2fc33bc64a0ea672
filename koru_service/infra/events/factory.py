"""Select the event transport from settings."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from redis.asyncio import Redis

from koru_service.infra.events.dispatcher import EventDispatcher
from koru_service.infra.events.memory import InMemoryEventBus, InMemoryEventListener
from koru_service.infra.events.redis import RedisEventBus, RedisEventListener

if TYPE_CHECKING:
    from koru_service.core.settings.event_bus import EventBusSettings
    from koru_service.core.store.base import Store

logger = logging.getLogger(__name__)


@dataclass
class EventTransport:
    """Producer and consumer ends of one transport."""

    bus: InMemoryEventBus | RedisEventBus
    listener: InMemoryEventListener | RedisEventListener

    async def close(self) -> None:
        await self.bus.close()


def build_event_transport(settings: EventBusSettings, store: Store) -> EventTransport:
    dispatcher = EventDispatcher.from_settings(store.events, settings)
    match settings.backend:
        case "memory":
            bus = InMemoryEventBus()
            logger.info("Using in-process event bus")
            return EventTransport(bus=bus, listener=InMemoryEventListener(bus, dispatcher))
        case "redis":
            client = Redis.from_url(settings.redis_url)
            logger.info("Using Redis event bus", extra={"channel": settings.channel})
            return EventTransport(
                bus=RedisEventBus(client, settings.channel),
                listener=RedisEventListener(client, settings.channel, dispatcher),
            )
