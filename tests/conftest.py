"""Pytest configuration and shared fixtures.

Organization:
    - Environment: tests never reach external infrastructure
    - Store and bus fixtures: in-memory backends
    - Domain helpers: registered users and groups
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from koru_service.core.settings import clear_settings_cache
from koru_service.features.groups.service import GroupService
from koru_service.features.users.service import UserService
from koru_service.infra.events import InMemoryEventBus
from koru_service.infra.logging import clear_log_context
from koru_service.infra.store.memory import InMemoryStore

if TYPE_CHECKING:
    from koru_service.domain.group import Group
    from koru_service.domain.user import User

# Ensure tests run without external infrastructure
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("EVENT_BUS_BACKEND", "memory")
os.environ.setdefault("NOTIFICATION_PROVIDER", "none")


@pytest.fixture(autouse=True)
def _isolate_settings_and_context():
    clear_settings_cache()
    clear_log_context()
    yield
    clear_settings_cache()
    clear_log_context()


# ============================================================================
# Store and bus fixtures
# ============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def user_service(store: InMemoryStore, bus: InMemoryEventBus) -> UserService:
    return UserService(store, bus)


@pytest.fixture
def group_service(store: InMemoryStore, bus: InMemoryEventBus) -> GroupService:
    return GroupService(store, bus)


def _drain(bus: InMemoryEventBus) -> list:
    ids = []
    while not bus.queue.empty():
        ids.append(bus.queue.get_nowait())
        bus.queue.task_done()
    return ids


@pytest.fixture
def drain(bus: InMemoryEventBus):
    """Pop every id currently queued on the bus."""
    return lambda: _drain(bus)


# ============================================================================
# Domain helpers
# ============================================================================


@pytest.fixture
def register(user_service: UserService):
    """Register a user by first name; email is derived from it."""

    async def _register(name: str) -> User:
        return await user_service.register(name, f"{name.lower()}@koru.test", "hash")

    return _register


@pytest.fixture
async def trip(register, group_service: GroupService, bus: InMemoryEventBus) -> tuple[Group, User, User]:
    """Group "Trip" administered by Alice, joined by Bob; bus emptied."""
    alice = await register("Alice")
    bob = await register("Bob")
    group = await group_service.create_group(alice.id, "Trip")
    await group_service.join_group(bob.id, group.id, "255,0,0")
    _drain(bus)
    return await group_service.get_group(alice.id, group.id), alice, bob
