"""Tests for the in-memory store and its event log."""

from __future__ import annotations

from uuid import uuid4

import pytest

from koru_service.core.events.models import UserCreated, UserEvent
from koru_service.core.store.exceptions import CorruptedDataError, FetchError, InsertError, TransactionError
from koru_service.domain.user import User
from koru_service.infra.store.memory import InMemoryStore
from koru_service.infra.store.memory.repositories import CRASHED


def _user_event() -> UserEvent:
    return UserEvent(user_id=uuid4(), kind=UserCreated(name="Alice", email="alice@koru.test"))


@pytest.mark.unit
class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_writes_invisible_until_commit(self):
        store = InMemoryStore()
        user = User.create("Alice", "alice@koru.test")

        async with store.transaction() as tx:
            await store.users.save(tx, user)
            assert await store.users.find(user.id) is None
            await store.commit(tx)

        assert (await store.users.find(user.id)).email == "alice@koru.test"

    @pytest.mark.asyncio
    async def test_rollback_discards_everything(self):
        store = InMemoryStore()
        user = User.create("Alice", "alice@koru.test")
        events = user.pull_events()

        async with store.transaction() as tx:
            await store.users.save(tx, user)
            await store.events.save(tx, events)
            await store.rollback(tx)

        assert await store.users.find(user.id) is None
        assert await store.events.find(events[0].id) is None

    @pytest.mark.asyncio
    async def test_leaving_block_without_commit_rolls_back(self):
        store = InMemoryStore()
        user = User.create("Alice", "alice@koru.test")

        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                await store.users.save(tx, user)
                raise RuntimeError("boom")

        assert not tx.is_active
        assert await store.users.find(user.id) is None

    @pytest.mark.asyncio
    async def test_closed_transaction_is_rejected(self):
        store = InMemoryStore()
        tx = await store.begin_transaction()
        await store.commit(tx)

        with pytest.raises(TransactionError):
            await store.users.save(tx, User.create("Alice", "alice@koru.test"))
        with pytest.raises(TransactionError):
            await store.commit(tx)

    @pytest.mark.asyncio
    async def test_crashed_event_log_keeps_entities_out(self):
        store = InMemoryStore(crash_events=True)
        user = User.create("Alice", "alice@koru.test")

        with pytest.raises(CorruptedDataError, match=CRASHED):
            async with store.transaction() as tx:
                await store.users.save(tx, user)
                await store.events.save(tx, user.pull_events())
                await store.commit(tx)

        assert await store.users.find(user.id) is None

    @pytest.mark.asyncio
    async def test_reads_return_copies(self):
        store = InMemoryStore()
        user = User.create("Alice", "alice@koru.test")
        async with store.transaction() as tx:
            await store.users.save(tx, user)
            await store.commit(tx)

        loaded = await store.users.find(user.id)
        loaded.name = "Mallory"

        assert (await store.users.find(user.id)).name == "Alice"


@pytest.mark.unit
class TestEventLog:
    @pytest.mark.asyncio
    async def test_saved_event_is_found_unprocessed(self):
        store = InMemoryStore()
        event = _user_event()
        async with store.transaction() as tx:
            await store.events.save(tx, [event])
            await store.commit(tx)

        assert await store.events.find(event.id) == event
        assert await store.events.processed_at(event.id) is None

    @pytest.mark.asyncio
    async def test_unknown_event_is_none(self):
        assert await InMemoryStore().events.find(uuid4()) is None

    @pytest.mark.asyncio
    async def test_mark_processed_is_idempotent(self):
        store = InMemoryStore()
        event = _user_event()
        async with store.transaction() as tx:
            await store.events.save(tx, [event])
            await store.commit(tx)

        await store.events.mark_processed(event.id)
        first = await store.events.processed_at(event.id)
        await store.events.mark_processed(event.id)

        assert first is not None
        assert await store.events.processed_at(event.id) == first

    @pytest.mark.asyncio
    async def test_logged_event_is_never_overwritten(self):
        store = InMemoryStore()
        event = _user_event()
        async with store.transaction() as tx:
            await store.events.save(tx, [event])
            await store.commit(tx)
        await store.events.mark_processed(event.id)
        processed = await store.events.processed_at(event.id)

        with pytest.raises(InsertError):
            async with store.transaction() as tx:
                await store.events.save(tx, [event])

        assert await store.events.processed_at(event.id) == processed

    @pytest.mark.asyncio
    async def test_duplicate_committed_meanwhile_applies_nothing(self):
        store = InMemoryStore()
        event = _user_event()
        user = User.create("Bob", "bob@koru.test")
        first = await store.begin_transaction()
        second = await store.begin_transaction()
        await store.events.save(first, [event])
        await store.users.save(second, user)
        await store.events.save(second, [event])

        await store.commit(first)
        with pytest.raises(InsertError):
            await store.commit(second)
        await store.rollback(second)

        assert await store.users.find(user.id) is None
        assert await store.events.processed_at(event.id) is None

    @pytest.mark.asyncio
    async def test_duplicate_ids_in_one_batch_rejected(self):
        store = InMemoryStore()
        event = _user_event()

        with pytest.raises(InsertError):
            async with store.transaction() as tx:
                await store.events.save(tx, [event, event])

        assert await store.events.find(event.id) is None

    @pytest.mark.asyncio
    async def test_mark_unknown_event_fails(self):
        with pytest.raises(FetchError):
            await InMemoryStore().events.mark_processed(uuid4())

    @pytest.mark.asyncio
    async def test_crash_switch_fails_reads(self):
        store = InMemoryStore()
        store.events.crashed = True

        with pytest.raises(CorruptedDataError):
            await store.events.find(uuid4())
