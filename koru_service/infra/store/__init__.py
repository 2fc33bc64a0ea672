"""Store backends and the factory selecting one from settings."""

from koru_service.infra.store.factory import build_store

__all__ = ["build_store"]
