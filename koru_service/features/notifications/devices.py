"""Registration of push devices."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.core.store.exceptions import RepositoryError

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.core.store.base import Store

logger = logging.getLogger(__name__)


class DeviceService:
    """Store or forget the device a user receives notifications on.

    Failures only lose notifications, so they are logged and not raised.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    async def register(self, user_id: UUID, device_id: str) -> None:
        try:
            await self._store.devices.save(user_id, device_id)
        except RepositoryError:
            logger.exception("Failed to register device", extra={"user_id": str(user_id)})

    async def remove(self, user_id: UUID) -> None:
        try:
            await self._store.devices.remove(user_id)
        except RepositoryError:
            logger.exception("Failed to remove device", extra={"user_id": str(user_id)})
