"""Repository protocols implemented by every store backend."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from koru_service.core.events.models import GroupEvent, UserEvent
    from koru_service.core.store.base import Transaction
    from koru_service.domain.expense import Expense
    from koru_service.domain.group import Group
    from koru_service.domain.settlement import Settlement
    from koru_service.domain.user import User


class UserRepository(Protocol):
    async def save(self, tx: Transaction, user: User) -> None: ...

    async def delete(self, tx: Transaction, user_id: UUID) -> None: ...

    async def find(self, user_id: UUID) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...


class CredentialRepository(Protocol):
    async def save(self, tx: Transaction, email: str, password_hash: str) -> None: ...

    async def delete(self, tx: Transaction, email: str) -> None: ...

    async def find(self, email: str) -> str | None:
        """Stored hash for ``email``; an empty stored hash is corrupted data."""
        ...


class DeviceRepository(Protocol):
    """Push device ids per user. Writes are immediate, outside any unit of work."""

    async def save(self, user_id: UUID, device_id: str) -> None: ...

    async def find(self, user_id: UUID) -> str | None: ...

    async def remove(self, user_id: UUID) -> None: ...


class GroupRepository(Protocol):
    async def save(self, tx: Transaction, group: Group) -> None:
        """Upsert the group row and its member rows."""
        ...

    async def delete(self, tx: Transaction, group_id: UUID) -> None: ...

    async def find(self, group_id: UUID) -> Group | None: ...


class ExpenseRepository(Protocol):
    async def save(self, tx: Transaction, expense: Expense) -> None: ...

    async def delete(self, tx: Transaction, expense_id: UUID) -> None: ...

    async def find(self, expense_id: UUID) -> Expense | None: ...

    async def find_unsettled(self, group_id: UUID) -> list[Expense]: ...


class SettlementRepository(Protocol):
    async def save(self, tx: Transaction, settlement: Settlement) -> None: ...

    async def find(self, settlement_id: UUID) -> Settlement | None: ...

    async def find_last(self, group_id: UUID) -> Settlement | None: ...


class EventRepository(Protocol):
    """Append-only durable event log."""

    async def save(self, tx: Transaction, events: Sequence[UserEvent | GroupEvent]) -> None:
        """Append ``events`` in order within ``tx``. Never commits.

        Raises:
            InsertError: The events could not be staged, or an event id is already logged.
            CorruptedDataError: The backend is in a corrupted state.
        """
        ...

    async def find(self, event_id: UUID) -> UserEvent | GroupEvent | None:
        """Return the committed event, or ``None`` if it is not (yet) visible.

        Raises:
            CorruptedDataError: The stored body is not a valid event.
        """
        ...

    async def mark_processed(self, event_id: UUID) -> None:
        """Set ``processed_at`` to now in its own short transaction.

        Raises:
            FetchError: No event with ``event_id`` exists.
        """
        ...

    async def processed_at(self, event_id: UUID) -> datetime | None:
        """Completion time of the event, ``None`` while unprocessed.

        Raises:
            FetchError: No event with ``event_id`` exists.
        """
        ...
