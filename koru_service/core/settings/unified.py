"""Unified settings composition.

Each nested settings class still loads from its own environment prefix.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .app import AppSettings
from .event_bus import EventBusSettings
from .logs import LoggingSettings
from .notification import NotificationSettings
from .store import StoreSettings


class Settings(BaseSettings):
    """All domain settings in one object.

    Example:
        settings = Settings()
        assert settings.store.backend == "memory"
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    event_bus: EventBusSettings = Field(default_factory=EventBusSettings)
    notification: NotificationSettings = Field(default_factory=NotificationSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get unified settings instance (cached)."""
    return Settings()
