"""Push notification provider settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

NotificationProvider = Literal["none", "memory", "pushy"]


class NotificationSettings(BaseSettings):
    """Notification settings.

    Environment variables use NOTIFICATION_ prefix.
    Example: NOTIFICATION_PROVIDER=pushy, NOTIFICATION_PUSHY_TOKEN=...
    """

    provider: NotificationProvider = Field(
        default="none",
        description="Notification provider; 'none' disables the notifier processor",
    )
    pushy_url: str = Field(default="https://api.pushy.me", description="Pushy API base URL")
    pushy_token: SecretStr | None = Field(default=None, description="Pushy secret API key")
    timeout: float = Field(default=10.0, ge=0.1, le=120.0, description="HTTP timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_enabled(self) -> bool:
        return self.provider != "none"
