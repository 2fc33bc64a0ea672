"""Event worker: consumes published event ids and runs the processors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.features.notifications.notifier import Notifier

if TYPE_CHECKING:
    from koru_service.core.events.bus import EventListener, EventProcessor
    from koru_service.core.store.base import Store
    from koru_service.features.notifications.service import NotificationService

logger = logging.getLogger(__name__)


class Worker:
    """Owns a listener and the processors registered on it."""

    def __init__(self, listener: EventListener) -> None:
        self._listener = listener
        self._processors: list[EventProcessor] = []

    @classmethod
    def build(
        cls,
        listener: EventListener,
        store: Store,
        notifications: NotificationService | None,
    ) -> Worker:
        """Wire the processors enabled by configuration."""
        worker = cls(listener)
        if notifications is not None:
            worker.register(Notifier(store, notifications))
        else:
            logger.info("Notifications disabled, events will only be marked processed")
        return worker

    @property
    def processors(self) -> tuple[EventProcessor, ...]:
        return tuple(self._processors)

    def register(self, processor: EventProcessor) -> None:
        self._listener.register(processor)
        self._processors.append(processor)

    async def run(self) -> None:
        """Listen until cancelled."""
        logger.info("Event worker started", extra={"processors": len(self._processors)})
        try:
            await self._listener.listen()
        finally:
            logger.info("Event worker stopped")
