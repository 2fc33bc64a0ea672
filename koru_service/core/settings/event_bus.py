"""Event bus transport and worker fetch settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EventBusBackend = Literal["memory", "redis"]


class EventBusSettings(BaseSettings):
    """Event bus settings.

    Environment variables use EVENT_BUS_ prefix.
    Example: EVENT_BUS_BACKEND=redis, EVENT_BUS_REDIS_URL="redis://localhost:6379/0"
    """

    backend: EventBusBackend = Field(
        default="memory",
        description="Transport for event ids: in-process queue or Redis pub/sub",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used when backend=redis",
    )
    channel: str = Field(
        default="koru-events",
        min_length=1,
        description="Pub/sub channel carrying event ids",
    )

    # Bounded wait while a published event is not yet visible in the log
    fetch_max_attempts: int = Field(default=5, ge=1, le=50, description="Fetch attempts per event id")
    fetch_initial_delay: float = Field(default=0.05, ge=0.0, le=10.0, description="First backoff delay (s)")
    fetch_max_delay: float = Field(default=1.0, ge=0.0, le=60.0, description="Backoff delay cap (s)")

    model_config = SettingsConfigDict(
        env_prefix="EVENT_BUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
