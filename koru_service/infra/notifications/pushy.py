"""Pushy push notification client.

Looks up the recipient's registered device and posts the message as
``"title|body"`` to ``{url}/push?api_key=...``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from koru_service.core.store.exceptions import RepositoryError
from koru_service.features.notifications.service import NotificationError

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.core.settings.notification import NotificationSettings
    from koru_service.core.store.repositories import DeviceRepository

logger = logging.getLogger(__name__)


class PushyNotificationService:
    def __init__(
        self,
        devices: DeviceRepository,
        url: str,
        token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._devices = devices
        self._url = url.rstrip("/")
        self._token = token
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, devices: DeviceRepository, settings: NotificationSettings) -> PushyNotificationService:
        if settings.pushy_token is None:
            msg = "NOTIFICATION_PUSHY_TOKEN must be set when NOTIFICATION_PROVIDER=pushy"
            raise ValueError(msg)
        return cls(
            devices,
            url=settings.pushy_url,
            token=settings.pushy_token.get_secret_value(),
            timeout=settings.timeout,
        )

    async def send(self, recipient_id: UUID, title: str, body: str) -> None:
        try:
            device = await self._devices.find(recipient_id)
        except RepositoryError as e:
            raise NotificationError("Failed to look up device", recipient_id) from e
        if device is None:
            raise NotificationError("No device registered", recipient_id)

        payload = {"to": device, "data": {"message": f"{title}|{body}"}}
        try:
            response = await self._client.post(
                f"{self._url}/push",
                params={"api_key": self._token},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise NotificationError(f"Pushy request failed: {e}", recipient_id) from e

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "Pushy rejected notification",
                extra={"recipient_id": str(recipient_id), "status_code": response.status_code},
            )
            raise NotificationError(f"Pushy returned HTTP {response.status_code}", recipient_id)

    async def close(self) -> None:
        await self._client.aclose()
