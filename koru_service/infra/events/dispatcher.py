"""Per-event delivery shared by every listener.

For each announced id: fetch the event from the log (retrying while the
producer's commit is not yet visible), hand it to every registered
processor in order, then mark it processed. Processor failures are logged
and never stop delivery to the remaining processors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.core.store.exceptions import CorruptedDataError, RepositoryError
from koru_service.infra.logging import remove_from_log_context, set_log_context
from koru_service.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.core.events.bus import EventProcessor
    from koru_service.core.events.models import GroupEvent, UserEvent
    from koru_service.core.settings.event_bus import EventBusSettings
    from koru_service.core.store.repositories import EventRepository

logger = logging.getLogger(__name__)


class EventNotVisibleError(Exception):
    """The announced event is not (yet) readable from the log."""

    def __init__(self, event_id: UUID) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class EventDispatcher:
    """Fetch, dispatch and complete events announced on a bus."""

    def __init__(
        self,
        events: EventRepository,
        *,
        fetch_max_attempts: int = 5,
        fetch_initial_delay: float = 0.05,
        fetch_max_delay: float = 1.0,
    ) -> None:
        self._events = events
        self._processors: list[EventProcessor] = []
        self._started = False
        self._fetch = retry(
            max_attempts=fetch_max_attempts,
            initial_delay=fetch_initial_delay,
            max_delay=fetch_max_delay,
            jitter=False,
            exceptions=(EventNotVisibleError,),
        )(self._fetch_once)

    @classmethod
    def from_settings(cls, events: EventRepository, settings: EventBusSettings) -> EventDispatcher:
        return cls(
            events,
            fetch_max_attempts=settings.fetch_max_attempts,
            fetch_initial_delay=settings.fetch_initial_delay,
            fetch_max_delay=settings.fetch_max_delay,
        )

    @property
    def processors(self) -> tuple[EventProcessor, ...]:
        return tuple(self._processors)

    def register(self, processor: EventProcessor) -> None:
        if self._started:
            msg = "Processors must be registered before listening starts"
            raise RuntimeError(msg)
        self._processors.append(processor)
        logger.info("Registered event processor", extra={"processor": type(processor).__name__})

    def start(self) -> None:
        self._started = True

    async def _fetch_once(self, event_id: UUID) -> UserEvent | GroupEvent:
        event = await self._events.find(event_id)
        if event is None:
            raise EventNotVisibleError(event_id)
        return event

    async def dispatch(self, event_id: UUID) -> bool:
        """Deliver one event. Returns False when the id was dropped unprocessed."""
        set_log_context(event_id=str(event_id))
        try:
            try:
                event = await self._fetch(event_id)
            except RetryError as e:
                logger.warning(
                    "Event not visible in the log, skipping",
                    extra={"attempts": e.attempts, "waited": round(e.total_delay, 3)},
                )
                return False
            except RepositoryError as e:
                logger.error(
                    "Failed to fetch event, skipping",
                    exc_info=True,
                    extra={"corrupted_data": isinstance(e, CorruptedDataError)},
                )
                return False

            for processor in self._processors:
                try:
                    await processor.handle(event)
                except Exception:
                    logger.exception(
                        "Event processor failed",
                        extra={"processor": type(processor).__name__},
                    )

            try:
                await self._events.mark_processed(event_id)
            except RepositoryError:
                logger.exception("Failed to mark event processed")
            else:
                logger.debug("Event processed")
            return True
        finally:
            remove_from_log_context("event_id")
