"""Tests for account use cases."""

from __future__ import annotations

from uuid import uuid4

import pytest

from koru_service.core.events.models import UserCreated, UserDeleted, UserLogin, UserLogout
from koru_service.core.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from koru_service.features.users.service import UserService
from koru_service.infra.store.memory import InMemoryStore


@pytest.mark.unit
class TestUserService:
    @pytest.mark.asyncio
    async def test_register_persists_user_and_event(self, user_service, store, drain):
        user = await user_service.register("Alice", "Alice@Koru.test", "hash")

        [event_id] = drain()
        event = await store.events.find(event_id)
        assert event.kind == UserCreated(name="Alice", email="alice@koru.test")
        assert event.user_id == user.id
        assert await store.credentials.find("alice@koru.test") == "hash"

    @pytest.mark.asyncio
    async def test_email_must_be_unique(self, user_service, drain):
        await user_service.register("Alice", "alice@koru.test")
        drain()

        with pytest.raises(ConflictException) as exc_info:
            await user_service.register("Other Alice", "ALICE@koru.test")

        assert exc_info.value.type == "email-taken"
        assert drain() == []

    @pytest.mark.asyncio
    async def test_invalid_input_rejected(self, user_service):
        with pytest.raises(ValidationException):
            await user_service.register("", "alice@koru.test")

    @pytest.mark.asyncio
    async def test_login_logout_delete_emit_events(self, user_service, store, drain):
        user = await user_service.register("Alice", "alice@koru.test", "hash")
        drain()

        await user_service.login("alice@koru.test", "hash")
        await user_service.logout(user.id)
        await user_service.delete(user.id)

        kinds = [type((await store.events.find(i)).kind) for i in drain()]
        assert kinds == [UserLogin, UserLogout, UserDeleted]

    @pytest.mark.asyncio
    async def test_wrong_password_unauthorized(self, user_service):
        await user_service.register("Alice", "alice@koru.test", "hash")

        with pytest.raises(UnauthorizedException):
            await user_service.login("alice@koru.test", "other")

    @pytest.mark.asyncio
    async def test_unknown_user(self, user_service):
        with pytest.raises(NotFoundException):
            await user_service.get(uuid4())

    @pytest.mark.asyncio
    async def test_delete_removes_account(self, user_service, store, drain):
        user = await user_service.register("Alice", "alice@koru.test", "hash")
        await store.devices.save(user.id, "device-a")
        drain()

        await user_service.delete(user.id)

        with pytest.raises(NotFoundException):
            await user_service.get(user.id)
        assert await store.users.find_by_email("alice@koru.test") is None
        assert await store.credentials.find("alice@koru.test") is None
        assert await store.devices.find(user.id) is None
        [event_id] = drain()
        assert isinstance((await store.events.find(event_id)).kind, UserDeleted)

    @pytest.mark.asyncio
    async def test_email_reusable_after_delete(self, user_service):
        user = await user_service.register("Alice", "alice@koru.test")
        await user_service.delete(user.id)

        again = await user_service.register("Alice", "alice@koru.test")

        assert again.id != user.id

    @pytest.mark.asyncio
    async def test_logout_forgets_device(self, user_service, store):
        user = await user_service.register("Alice", "alice@koru.test", "hash")
        await store.devices.save(user.id, "device-a")

        await user_service.logout(user.id)

        assert await store.devices.find(user.id) is None
        assert await user_service.get(user.id) == user

    @pytest.mark.asyncio
    async def test_logout_succeeds_when_device_removal_fails(self, bus, drain):
        store = InMemoryStore(crash_devices=True)
        service = UserService(store, bus)
        user = await service.register("Alice", "alice@koru.test")
        drain()

        await service.logout(user.id)

        [event_id] = drain()
        assert isinstance((await store.events.find(event_id)).kind, UserLogout)
