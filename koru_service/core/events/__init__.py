"""Domain events and the contracts used to deliver them."""

from koru_service.core.events.bus import (
    EventBus,
    EventHandlerError,
    EventListener,
    EventProcessor,
    PublishError,
)
from koru_service.core.events.models import (
    Event,
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseModified,
    GroupCreated,
    GroupDeleted,
    GroupEvent,
    MemberColorChanged,
    MemberJoined,
    Settled,
    UserCreated,
    UserDeleted,
    UserEvent,
    UserLogin,
    UserLogout,
    aggregate_id,
    decode_event,
    encode_event,
    from_document,
    to_document,
)

__all__ = [
    "Event",
    "EventBus",
    "EventHandlerError",
    "EventListener",
    "EventProcessor",
    "ExpenseCreated",
    "ExpenseDeleted",
    "ExpenseModified",
    "GroupCreated",
    "GroupDeleted",
    "GroupEvent",
    "MemberColorChanged",
    "MemberJoined",
    "PublishError",
    "Settled",
    "UserCreated",
    "UserDeleted",
    "UserEvent",
    "UserLogin",
    "UserLogout",
    "aggregate_id",
    "decode_event",
    "encode_event",
    "from_document",
    "to_document",
]
