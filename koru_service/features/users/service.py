"""Account use cases."""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from koru_service.core.exceptions import ConflictException, NotFoundException, UnauthorizedException
from koru_service.core.store.exceptions import RepositoryError
from koru_service.domain.user import User
from koru_service.domain.values import parse_email
from koru_service.features.base import EventPublishingService
from koru_service.features.notifications.devices import DeviceService

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.core.events.bus import EventBus
    from koru_service.core.store.base import Store

logger = logging.getLogger(__name__)


class UserService(EventPublishingService):
    """Register, log in, log out and delete accounts.

    Password hashing happens before this layer; only hashes are compared.
    Logging out or deleting an account also forgets the push device.
    """

    def __init__(self, store: Store, bus: EventBus, devices: DeviceService | None = None) -> None:
        super().__init__(store, bus)
        self._devices = devices or DeviceService(store)

    async def register(self, name: str, email: str, password_hash: str | None = None) -> User:
        user = User.create(name, email)
        try:
            existing = await self._store.users.find_by_email(user.email)
        except RepositoryError as e:
            raise self._storage_error("register", e) from e
        if existing is not None:
            raise ConflictException(detail="Email is already registered", type="email-taken")

        async with self.unit_of_work("register", user.pull_events()) as tx:
            await self._store.users.save(tx, user)
            if password_hash:
                await self._store.credentials.save(tx, user.email, password_hash)
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    async def login(self, email: str, password_hash: str) -> User:
        email = parse_email(email)
        try:
            stored = await self._store.credentials.find(email)
            user = await self._store.users.find_by_email(email)
        except RepositoryError as e:
            raise self._storage_error("login", e) from e
        if stored is None or user is None or not hmac.compare_digest(stored, password_hash):
            raise UnauthorizedException(detail="Invalid credentials")

        user.login()
        async with self.unit_of_work("login", user.pull_events()):
            pass
        return user

    async def logout(self, user_id: UUID) -> None:
        user = await self.get(user_id)
        user.logout()
        async with self.unit_of_work("logout", user.pull_events()):
            pass
        await self._devices.remove(user_id)

    async def delete(self, user_id: UUID) -> None:
        user = await self.get(user_id)
        user.delete()
        async with self.unit_of_work("delete_user", user.pull_events()) as tx:
            await self._store.credentials.delete(tx, user.email)
            await self._store.users.delete(tx, user.id)
        await self._devices.remove(user_id)
        logger.info("User deleted", extra={"user_id": str(user_id)})

    async def get(self, user_id: UUID) -> User:
        try:
            user = await self._store.users.find(user_id)
        except RepositoryError as e:
            raise self._storage_error("get_user", e) from e
        if user is None:
            raise NotFoundException(detail="User not found", type="user-not-found")
        return user
