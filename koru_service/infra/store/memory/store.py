"""In-memory store backend.

Used for local runs and tests. Every repository has a crash switch that
makes all of its operations fail with ``CorruptedDataError("Crashed store")``
so failure paths can be exercised without a real database.
"""

from __future__ import annotations

from contextlib import ExitStack
import logging

from koru_service.core.store.base import Store, Transaction
from koru_service.core.store.exceptions import TransactionError
from koru_service.infra.store.memory.repositories import (
    Collection,
    InMemoryCredentialRepository,
    InMemoryDeviceRepository,
    InMemoryEventRepository,
    InMemoryExpenseRepository,
    InMemoryGroupRepository,
    InMemorySettlementRepository,
    InMemoryTransaction,
    InMemoryUserRepository,
)

logger = logging.getLogger(__name__)


class InMemoryStore(Store):
    """Dict-backed store with staged, all-or-nothing commits."""

    def __init__(
        self,
        *,
        crash_users: bool = False,
        crash_credentials: bool = False,
        crash_devices: bool = False,
        crash_groups: bool = False,
        crash_expenses: bool = False,
        crash_settlements: bool = False,
        crash_events: bool = False,
    ) -> None:
        # Fixed order; commit takes the locks in this order
        self._collections = [
            Collection(name)
            for name in ("users", "credentials", "devices", "groups", "expenses", "settlements", "events")
        ]
        users, credentials, devices, groups, expenses, settlements, events = self._collections
        self._users = InMemoryUserRepository(users, crash_users)
        self._credentials = InMemoryCredentialRepository(credentials, crash_credentials)
        self._devices = InMemoryDeviceRepository(devices, crash_devices)
        self._groups = InMemoryGroupRepository(groups, crash_groups)
        self._expenses = InMemoryExpenseRepository(expenses, crash_expenses)
        self._settlements = InMemorySettlementRepository(settlements, crash_settlements)
        self._events = InMemoryEventRepository(events, crash_events)

    async def begin_transaction(self) -> InMemoryTransaction:
        return InMemoryTransaction()

    async def commit(self, tx: Transaction) -> None:
        if not isinstance(tx, InMemoryTransaction):
            msg = "Transaction does not belong to the in-memory store"
            raise TransactionError(msg)
        tx.ensure_active()
        with ExitStack() as stack:
            for collection in self._collections:
                stack.enter_context(collection.lock)
            for collection, check in tx.checks:
                check(collection.rows)
            for collection, operation in tx.operations:
                operation(collection.rows)
        logger.debug("Committed in-memory transaction", extra={"operations": len(tx.operations)})
        tx.operations.clear()
        tx.checks.clear()
        tx.close()

    async def rollback(self, tx: Transaction) -> None:
        if isinstance(tx, InMemoryTransaction):
            tx.operations.clear()
            tx.checks.clear()
        tx.close()

    @property
    def users(self) -> InMemoryUserRepository:
        return self._users

    @property
    def credentials(self) -> InMemoryCredentialRepository:
        return self._credentials

    @property
    def devices(self) -> InMemoryDeviceRepository:
        return self._devices

    @property
    def groups(self) -> InMemoryGroupRepository:
        return self._groups

    @property
    def expenses(self) -> InMemoryExpenseRepository:
        return self._expenses

    @property
    def settlements(self) -> InMemorySettlementRepository:
        return self._settlements

    @property
    def events(self) -> InMemoryEventRepository:
        return self._events
