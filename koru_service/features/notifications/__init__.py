"""Push notifications for group activity."""

from koru_service.features.notifications.devices import DeviceService
from koru_service.features.notifications.messages import NotificationMessage, render_message
from koru_service.features.notifications.notifier import Notifier
from koru_service.features.notifications.service import NotificationError, NotificationService

__all__ = [
    "DeviceService",
    "NotificationError",
    "NotificationMessage",
    "NotificationService",
    "Notifier",
    "render_message",
]
