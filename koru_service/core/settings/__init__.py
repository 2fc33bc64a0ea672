"""Modular pydantic-settings configuration.

One frozen settings class per concern, each with its own environment prefix:

- ``APP_``          application identity and HTTP server
- ``LOG_``          logging
- ``STORE_``        persistence backend
- ``EVENT_BUS_``    event id transport and worker fetch retry
- ``NOTIFICATION_`` push notification provider

Import settings via cached loaders:
    from koru_service.core.settings import get_store_settings

Or the unified view:
    from koru_service.core.settings import get_settings
"""

from __future__ import annotations

from .app import AppSettings
from .event_bus import EventBusSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_event_bus_settings,
    get_logging_settings,
    get_notification_settings,
    get_store_settings,
)
from .logs import LoggingSettings
from .notification import NotificationSettings
from .store import StoreSettings
from .unified import Settings, get_settings

__all__ = [
    "AppSettings",
    "EventBusSettings",
    "LoggingSettings",
    "NotificationSettings",
    "Settings",
    "StoreSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_event_bus_settings",
    "get_logging_settings",
    "get_notification_settings",
    "get_settings",
    "get_store_settings",
]
