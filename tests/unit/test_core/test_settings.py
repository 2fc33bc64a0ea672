"""Tests for environment-driven settings."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from koru_service.core.settings import (
    EventBusSettings,
    NotificationSettings,
    StoreSettings,
    get_event_bus_settings,
    get_settings,
)


@pytest.mark.unit
class TestSettings:
    def test_defaults_need_no_infrastructure(self, monkeypatch: pytest.MonkeyPatch):
        for var in ("STORE_BACKEND", "EVENT_BUS_BACKEND", "NOTIFICATION_PROVIDER"):
            monkeypatch.delenv(var, raising=False)

        settings = get_settings()

        assert settings.store.backend == "memory"
        assert settings.event_bus.backend == "memory"
        assert settings.event_bus.fetch_max_attempts == 5
        assert settings.notification.provider == "none"
        assert not settings.notification.is_enabled

    def test_event_bus_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EVENT_BUS_BACKEND", "redis")
        monkeypatch.setenv("EVENT_BUS_CHANNEL", "expenses")

        settings = get_event_bus_settings()

        assert settings.backend == "redis"
        assert settings.channel == "expenses"

    def test_unknown_backend_is_rejected(self):
        with pytest.raises(ValidationError):
            EventBusSettings(backend="kafka")

    def test_database_url_is_secret(self):
        settings = StoreSettings(backend="postgres", database_url="postgresql+psycopg://u:p@db/koru")

        assert settings.is_configured
        assert "p@db" not in repr(settings)
        assert settings.get_database_url().endswith("@db/koru")

    def test_missing_database_url_raises(self):
        with pytest.raises(ValueError, match="STORE_DATABASE_URL"):
            StoreSettings(backend="postgres").get_database_url()

    def test_notification_provider_enables_notifications(self):
        assert NotificationSettings(provider="memory").is_enabled
