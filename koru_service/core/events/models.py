"""Domain event model.

Events form a closed, tagged hierarchy: the ``aggregate`` field separates
user events from group events and each family's ``kind`` is tagged by
``type``. Events are immutable once created and are persisted as one JSON
document each.

Example:
    event = GroupEvent(
        group_id=group.id,
        member_id=admin.id,
        kind=GroupCreated(name="Trip", color=MemberColor.default()),
    )
    restored = decode_event(encode_event(event))
    assert restored == event
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from koru_service.core.store.exceptions import CorruptedDataError
from koru_service.domain.values import MemberColor, Transaction


def utc_now() -> datetime:
    return datetime.now(UTC)


class _Kind(BaseModel):
    model_config = ConfigDict(frozen=True)


# ──────────────────────────────────────────────────────────────
# User event kinds
# ──────────────────────────────────────────────────────────────


class UserCreated(_Kind):
    type: Literal["user_created"] = "user_created"
    name: str
    email: str


class UserLogin(_Kind):
    type: Literal["user_login"] = "user_login"


class UserLogout(_Kind):
    type: Literal["user_logout"] = "user_logout"


class UserDeleted(_Kind):
    type: Literal["user_deleted"] = "user_deleted"


UserEventKind = Annotated[
    UserCreated | UserLogin | UserLogout | UserDeleted,
    Field(discriminator="type"),
]


# ──────────────────────────────────────────────────────────────
# Group event kinds
# ──────────────────────────────────────────────────────────────


class GroupCreated(_Kind):
    type: Literal["group_created"] = "group_created"
    name: str
    color: MemberColor


class MemberJoined(_Kind):
    type: Literal["member_joined"] = "member_joined"
    color: MemberColor


class MemberColorChanged(_Kind):
    type: Literal["member_color_changed"] = "member_color_changed"
    previous_color: MemberColor
    new_color: MemberColor


class ExpenseCreated(_Kind):
    type: Literal["expense_created"] = "expense_created"
    id: UUID
    description: str
    amount: Decimal
    date: datetime


class ExpenseModified(_Kind):
    type: Literal["expense_modified"] = "expense_modified"
    id: UUID
    previous_description: str
    new_description: str
    previous_amount: Decimal
    new_amount: Decimal


class ExpenseDeleted(_Kind):
    type: Literal["expense_deleted"] = "expense_deleted"
    id: UUID


class Settled(_Kind):
    type: Literal["settled"] = "settled"
    id: UUID
    start_date: datetime | None
    end_date: datetime
    transactions: tuple[Transaction, ...] = ()


class GroupDeleted(_Kind):
    type: Literal["group_deleted"] = "group_deleted"


GroupEventKind = Annotated[
    GroupCreated
    | MemberJoined
    | MemberColorChanged
    | ExpenseCreated
    | ExpenseModified
    | ExpenseDeleted
    | Settled
    | GroupDeleted,
    Field(discriminator="type"),
]


# ──────────────────────────────────────────────────────────────
# Event families
# ──────────────────────────────────────────────────────────────


class UserEvent(BaseModel):
    """Something that happened to a user account."""

    model_config = ConfigDict(frozen=True)

    aggregate: Literal["user"] = "user"
    id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(default_factory=utc_now)
    user_id: UUID
    kind: UserEventKind


class GroupEvent(BaseModel):
    """Something a member did inside a group."""

    model_config = ConfigDict(frozen=True)

    aggregate: Literal["group"] = "group"
    id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(default_factory=utc_now)
    group_id: UUID
    member_id: UUID
    kind: GroupEventKind


Event = Annotated[UserEvent | GroupEvent, Field(discriminator="aggregate")]

EVENT_ADAPTER: TypeAdapter[UserEvent | GroupEvent] = TypeAdapter(Event)


def aggregate_id(event: UserEvent | GroupEvent) -> UUID:
    """Id of the aggregate root the event refers to."""
    match event:
        case UserEvent():
            return event.user_id
        case GroupEvent():
            return event.group_id


def to_document(event: UserEvent | GroupEvent) -> dict[str, Any]:
    """JSON-compatible document for a JSON column."""
    return event.model_dump(mode="json")


def from_document(document: Any) -> UserEvent | GroupEvent:
    """Rebuild an event from a stored document.

    Raises:
        CorruptedDataError: The document does not describe a valid event.
    """
    try:
        return EVENT_ADAPTER.validate_python(document)
    except ValidationError as e:
        raise CorruptedDataError(
            "Stored event cannot be decoded",
            details={"errors": e.error_count()},
        ) from e


def encode_event(event: UserEvent | GroupEvent) -> str:
    return event.model_dump_json()


def decode_event(data: str | bytes) -> UserEvent | GroupEvent:
    """Parse an event from its JSON text.

    Raises:
        CorruptedDataError: The text is not a valid event document.
    """
    try:
        return EVENT_ADAPTER.validate_json(data)
    except ValidationError as e:
        raise CorruptedDataError(
            "Stored event cannot be decoded",
            details={"errors": e.error_count()},
        ) from e
