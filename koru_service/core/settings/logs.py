"""Logging configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Logging settings.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=DEBUG, LOG_JSON_LOGS=false
    """

    level: LogLevel = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Emit JSON Lines instead of text")
    console_enabled: bool = Field(default=True, description="Log to stderr")
    include_context: bool = Field(
        default=True,
        description="Inject contextvars log context (event_id, user_id, ...) into records",
    )
    capture_warnings: bool = Field(default=True, description="Route warnings through logging")

    file_path: Path | None = Field(default=None, description="Log file path; None disables file logging")
    file_max_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1024, description="Rotate the log file after this many bytes",
    )
    file_backup_count: int = Field(default=5, ge=0, le=100, description="Rotated files to keep")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Return kwargs suitable for configure_logging(...)."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "console_enabled": self.console_enabled,
            "include_context": self.include_context,
            "capture_warnings": self.capture_warnings,
            "file_path": str(self.file_path) if self.file_path else None,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
        }
