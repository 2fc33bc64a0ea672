"""Event transports and the dispatcher driving processors."""

from koru_service.infra.events.dispatcher import EventDispatcher, EventNotVisibleError
from koru_service.infra.events.factory import EventTransport, build_event_transport
from koru_service.infra.events.memory import InMemoryEventBus, InMemoryEventListener
from koru_service.infra.events.redis import RedisEventBus, RedisEventListener

__all__ = [
    "EventDispatcher",
    "EventNotVisibleError",
    "EventTransport",
    "InMemoryEventBus",
    "InMemoryEventListener",
    "RedisEventBus",
    "RedisEventListener",
    "build_event_transport",
]
