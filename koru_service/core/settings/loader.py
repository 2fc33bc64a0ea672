"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process. In tests, call ``get_*_settings.cache_clear()`` to force a reload.
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .event_bus import EventBusSettings
from .logs import LoggingSettings
from .notification import NotificationSettings
from .store import StoreSettings
from .unified import get_settings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Get cached store settings."""
    return StoreSettings()


@lru_cache(maxsize=1)
def get_event_bus_settings() -> EventBusSettings:
    """Get cached event bus settings."""
    return EventBusSettings()


@lru_cache(maxsize=1)
def get_notification_settings() -> NotificationSettings:
    """Get cached notification settings."""
    return NotificationSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_store_settings.cache_clear()
    get_event_bus_settings.cache_clear()
    get_notification_settings.cache_clear()
    get_settings.cache_clear()
