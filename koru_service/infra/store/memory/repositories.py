"""In-memory repositories.

Each collection is a dict guarded by its own ``threading.Lock``. Writes
made with a transaction are staged on it and applied by
:meth:`InMemoryStore.commit`. Reads return copies so callers can never
mutate stored state.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import copy
from dataclasses import dataclass
from datetime import datetime
import threading
from typing import TYPE_CHECKING, Any
from uuid import UUID

from koru_service.core.events.models import decode_event, encode_event, utc_now
from koru_service.core.store.base import Transaction
from koru_service.core.store.exceptions import CorruptedDataError, FetchError, InsertError, TransactionError

if TYPE_CHECKING:
    from koru_service.core.events.models import GroupEvent, UserEvent
    from koru_service.domain.expense import Expense
    from koru_service.domain.group import Group
    from koru_service.domain.settlement import Settlement
    from koru_service.domain.user import User

CRASHED = "Crashed store"


class InMemoryTransaction(Transaction):
    """Staged writes waiting for commit, in the order they were made."""

    def __init__(self) -> None:
        super().__init__()
        self.operations: list[tuple[Collection, Callable[[dict[Any, Any]], None]]] = []
        # Run under the commit locks before any operation is applied
        self.checks: list[tuple[Collection, Callable[[dict[Any, Any]], None]]] = []


class Collection:
    """A dict plus the lock guarding it."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.lock = threading.Lock()
        self.rows: dict[Any, Any] = {}


class _Repository:
    def __init__(self, collection: Collection, crashed: bool = False) -> None:
        self.collection = collection
        self.crashed = crashed

    def _check(self) -> None:
        if self.crashed:
            raise CorruptedDataError(CRASHED)

    def _stage(self, tx: Transaction, operation: Callable[[dict[Any, Any]], None]) -> None:
        self._check()
        if not isinstance(tx, InMemoryTransaction):
            msg = "Transaction does not belong to the in-memory store"
            raise TransactionError(msg)
        tx.ensure_active()
        tx.operations.append((self.collection, operation))

    def _require(self, tx: Transaction, check: Callable[[dict[Any, Any]], None]) -> None:
        if isinstance(tx, InMemoryTransaction):
            tx.checks.append((self.collection, check))

    def _get(self, key: Any) -> Any:
        self._check()
        with self.collection.lock:
            return copy.deepcopy(self.collection.rows.get(key))

    def _select(self, predicate: Callable[[Any], bool]) -> list[Any]:
        self._check()
        with self.collection.lock:
            return [copy.deepcopy(row) for row in self.collection.rows.values() if predicate(row)]


def _put(key: Any, value: Any) -> Callable[[dict[Any, Any]], None]:
    frozen = copy.deepcopy(value)

    def operation(rows: dict[Any, Any]) -> None:
        rows[key] = frozen

    return operation


def _absent(keys: Sequence[Any]) -> Callable[[dict[Any, Any]], None]:
    def check(rows: dict[Any, Any]) -> None:
        taken = [key for key in keys if key in rows]
        if taken or len(set(keys)) != len(keys):
            raise InsertError("Event already logged", details={"event_ids": [str(key) for key in taken or keys]})

    return check


def _pop(key: Any) -> Callable[[dict[Any, Any]], None]:
    def operation(rows: dict[Any, Any]) -> None:
        rows.pop(key, None)

    return operation


class InMemoryUserRepository(_Repository):
    async def save(self, tx: Transaction, user: User) -> None:
        stored = copy.copy(user)
        stored.events = []
        self._stage(tx, _put(user.id, stored))

    async def delete(self, tx: Transaction, user_id: UUID) -> None:
        self._stage(tx, _pop(user_id))

    async def find(self, user_id: UUID) -> User | None:
        return self._get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        matches = self._select(lambda user: user.email == email.lower())
        return matches[0] if matches else None


class InMemoryCredentialRepository(_Repository):
    async def save(self, tx: Transaction, email: str, password_hash: str) -> None:
        self._stage(tx, _put(email.lower(), password_hash))

    async def delete(self, tx: Transaction, email: str) -> None:
        self._stage(tx, _pop(email.lower()))

    async def find(self, email: str) -> str | None:
        password_hash = self._get(email.lower())
        if password_hash is not None and not password_hash:
            raise CorruptedDataError("Stored password hash is empty", details={"email": email})
        return password_hash


class InMemoryDeviceRepository(_Repository):
    async def save(self, user_id: UUID, device_id: str) -> None:
        self._check()
        with self.collection.lock:
            self.collection.rows[user_id] = device_id

    async def find(self, user_id: UUID) -> str | None:
        return self._get(user_id)

    async def remove(self, user_id: UUID) -> None:
        self._check()
        with self.collection.lock:
            self.collection.rows.pop(user_id, None)


class InMemoryGroupRepository(_Repository):
    async def save(self, tx: Transaction, group: Group) -> None:
        stored = copy.copy(group)
        stored.events = []
        self._stage(tx, _put(group.id, stored))

    async def delete(self, tx: Transaction, group_id: UUID) -> None:
        self._stage(tx, _pop(group_id))

    async def find(self, group_id: UUID) -> Group | None:
        return self._get(group_id)


class InMemoryExpenseRepository(_Repository):
    async def save(self, tx: Transaction, expense: Expense) -> None:
        self._stage(tx, _put(expense.id, expense))

    async def delete(self, tx: Transaction, expense_id: UUID) -> None:
        self._stage(tx, _pop(expense_id))

    async def find(self, expense_id: UUID) -> Expense | None:
        return self._get(expense_id)

    async def find_unsettled(self, group_id: UUID) -> list[Expense]:
        expenses = self._select(lambda e: e.group_id == group_id and not e.settled)
        return sorted(expenses, key=lambda e: e.created_at)


class InMemorySettlementRepository(_Repository):
    async def save(self, tx: Transaction, settlement: Settlement) -> None:
        self._stage(tx, _put(settlement.id, settlement))

    async def find(self, settlement_id: UUID) -> Settlement | None:
        return self._get(settlement_id)

    async def find_last(self, group_id: UUID) -> Settlement | None:
        settlements = self._select(lambda s: s.group_id == group_id)
        return max(settlements, key=lambda s: s.end_date, default=None)


@dataclass
class StoredEvent:
    """Log record: the serialized event plus its processing state."""

    id: UUID
    occurred_at: datetime
    data: str
    processed_at: datetime | None = None


class InMemoryEventRepository(_Repository):
    """Append-only: an id that is already logged is never overwritten."""

    async def save(self, tx: Transaction, events: Sequence[UserEvent | GroupEvent]) -> None:
        self._check()
        event_ids = [event.id for event in events]
        check = _absent(event_ids)
        with self.collection.lock:
            check(self.collection.rows)
        for event in events:
            record = StoredEvent(id=event.id, occurred_at=event.occurred_at, data=encode_event(event))
            self._stage(tx, _put(event.id, record))
        self._require(tx, check)

    async def find(self, event_id: UUID) -> UserEvent | GroupEvent | None:
        record: StoredEvent | None = self._get(event_id)
        if record is None:
            return None
        return decode_event(record.data)

    async def mark_processed(self, event_id: UUID) -> None:
        self._check()
        with self.collection.lock:
            record: StoredEvent | None = self.collection.rows.get(event_id)
            if record is None:
                raise FetchError("Event not found", details={"event_id": str(event_id)})
            if record.processed_at is None:
                record.processed_at = utc_now()

    async def processed_at(self, event_id: UUID) -> datetime | None:
        record: StoredEvent | None = self._get(event_id)
        if record is None:
            raise FetchError("Event not found", details={"event_id": str(event_id)})
        return record.processed_at

