"""Select a store backend from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.infra.store.memory import InMemoryStore
from koru_service.infra.store.sql import SqlStore

if TYPE_CHECKING:
    from koru_service.core.settings.store import StoreSettings
    from koru_service.core.store.base import Store

logger = logging.getLogger(__name__)


async def build_store(settings: StoreSettings) -> Store:
    """Create the configured store, creating the schema when asked to."""
    match settings.backend:
        case "memory":
            logger.info("Using in-memory store")
            return InMemoryStore()
        case "postgres":
            store = SqlStore.from_settings(settings)
            if settings.create_schema:
                await store.create_schema()
            logger.info("Using relational store", extra={"pool_size": settings.pool_size})
            return store
