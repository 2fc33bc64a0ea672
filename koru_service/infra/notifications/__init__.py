"""Notification transports and the factory selecting one from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from koru_service.infra.notifications.memory import InMemoryNotificationService, SentNotification
from koru_service.infra.notifications.pushy import PushyNotificationService

if TYPE_CHECKING:
    from koru_service.core.settings.notification import NotificationSettings
    from koru_service.core.store.base import Store
    from koru_service.features.notifications.service import NotificationService


def build_notification_service(settings: NotificationSettings, store: Store) -> NotificationService | None:
    """Configured transport, or None when notifications are disabled."""
    match settings.provider:
        case "none":
            return None
        case "memory":
            return InMemoryNotificationService()
        case "pushy":
            return PushyNotificationService.from_settings(store.devices, settings)


__all__ = [
    "InMemoryNotificationService",
    "PushyNotificationService",
    "SentNotification",
    "build_notification_service",
]
