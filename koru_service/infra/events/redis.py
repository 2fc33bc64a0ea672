"""Redis pub/sub event bus.

Each committed event id is published as its string form, one message per
id, on a single channel. Listeners re-fetch the event from the log, so a
message carries nothing but the id.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

from redis.exceptions import RedisError

from koru_service.core.events.bus import PublishError

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from koru_service.core.events.bus import EventProcessor
    from koru_service.infra.events.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


class RedisEventBus:
    def __init__(self, client: Redis, channel: str) -> None:
        self._client = client
        self.channel = channel

    async def publish(self, event_ids: Sequence[UUID]) -> None:
        try:
            for event_id in event_ids:
                await self._client.publish(self.channel, str(event_id))
        except RedisError as e:
            raise PublishError(f"Failed to publish on {self.channel}", event_ids) from e

    async def close(self) -> None:
        await self._client.aclose()


class RedisEventListener:
    def __init__(self, client: Redis, channel: str, dispatcher: EventDispatcher) -> None:
        self._client = client
        self.channel = channel
        self.dispatcher = dispatcher

    def register(self, processor: EventProcessor) -> None:
        self.dispatcher.register(processor)

    async def listen(self) -> None:
        """Consume the channel until the connection fails; transport errors propagate."""
        self.dispatcher.start()
        pubsub = self._client.pubsub()
        await pubsub.subscribe(self.channel)
        logger.info("Subscribed to event channel", extra={"channel": self.channel})
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                event_id = parse_event_id(message["data"])
                if event_id is None:
                    continue
                await self.dispatcher.dispatch(event_id)
        finally:
            await pubsub.aclose()


def parse_event_id(data: Any) -> UUID | None:
    if isinstance(data, bytes):
        data = data.decode(errors="replace")
    try:
        return UUID(str(data))
    except ValueError:
        logger.warning("Ignoring malformed event id", extra={"payload": str(data)[:64]})
        return None
