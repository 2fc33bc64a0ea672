"""Unit-of-work store contract.

A :class:`Store` hands out :class:`Transaction` handles and exposes one
repository per collection. Writes go through a transaction the caller
owns; nothing becomes visible to readers until :meth:`Store.commit`.

Example:
    async with store.transaction() as tx:
        await store.groups.save(tx, group)
        await store.events.save(tx, group.pull_events())
        await store.commit(tx)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from koru_service.core.store.exceptions import TransactionError

if TYPE_CHECKING:
    from koru_service.core.store.repositories import (
        CredentialRepository,
        DeviceRepository,
        EventRepository,
        ExpenseRepository,
        GroupRepository,
        SettlementRepository,
        UserRepository,
    )


class Transaction:
    """Opaque unit-of-work handle.

    Owned by the use case that opened it. Becomes inactive after commit or
    rollback; repositories reject inactive handles.
    """

    def __init__(self) -> None:
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def ensure_active(self) -> None:
        if not self._active:
            msg = "Transaction is no longer active"
            raise TransactionError(msg)

    def close(self) -> None:
        self._active = False


class Store(ABC):
    """Multi-repository store with unit-of-work semantics."""

    @abstractmethod
    async def begin_transaction(self) -> Transaction:
        """Open a unit of work.

        Raises:
            TransactionError: No transaction could be opened.
        """

    @abstractmethod
    async def commit(self, tx: Transaction) -> None:
        """Make every write of ``tx`` durable and visible at once.

        Raises:
            TransactionError: Nothing from ``tx`` was applied.
            InsertError: A staged event id is already logged; nothing was applied.
        """

    @abstractmethod
    async def rollback(self, tx: Transaction) -> None:
        """Discard ``tx``. Rolling back an inactive transaction is a no-op."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Open a transaction and roll it back unless the body committed it."""
        tx = await self.begin_transaction()
        try:
            yield tx
        finally:
            if tx.is_active:
                await self.rollback(tx)

    async def close(self) -> None:
        """Release backend resources."""

    @property
    @abstractmethod
    def users(self) -> UserRepository: ...

    @property
    @abstractmethod
    def credentials(self) -> CredentialRepository: ...

    @property
    @abstractmethod
    def devices(self) -> DeviceRepository: ...

    @property
    @abstractmethod
    def groups(self) -> GroupRepository: ...

    @property
    @abstractmethod
    def expenses(self) -> ExpenseRepository: ...

    @property
    @abstractmethod
    def settlements(self) -> SettlementRepository: ...

    @property
    @abstractmethod
    def events(self) -> EventRepository: ...
