"""Base class for use cases that produce domain events.

Entity writes and the events describing them share one unit of work.
Event ids are published only once that unit of work has committed; a
publish failure is logged and the committed state is kept.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from koru_service.core.events.bus import PublishError
from koru_service.core.exceptions import InternalServerException
from koru_service.core.store.exceptions import CorruptedDataError, RepositoryError

if TYPE_CHECKING:
    from koru_service.core.events.bus import EventBus
    from koru_service.core.events.models import GroupEvent, UserEvent
    from koru_service.core.store.base import Store, Transaction

logger = logging.getLogger(__name__)


class EventPublishingService:
    def __init__(self, store: Store, bus: EventBus) -> None:
        self._store = store
        self._bus = bus

    @asynccontextmanager
    async def unit_of_work(
        self,
        operation: str,
        events: Sequence[UserEvent | GroupEvent],
    ) -> AsyncIterator[Transaction]:
        """Yield a transaction for entity writes, then append ``events``, commit and publish.

        Example:
            async with self.unit_of_work("create_group", group.pull_events()) as tx:
                await self._store.groups.save(tx, group)
        """
        try:
            async with self._store.transaction() as tx:
                yield tx
                await self._store.events.save(tx, events)
                await self._store.commit(tx)
        except RepositoryError as e:
            logger.error(
                "Unit of work failed",
                exc_info=True,
                extra={"operation": operation, "corrupted_data": isinstance(e, CorruptedDataError)},
            )
            raise InternalServerException(extra={"operation": operation}) from e

        await self._publish(operation, events)

    async def _publish(self, operation: str, events: Sequence[UserEvent | GroupEvent]) -> None:
        if not events:
            return
        try:
            await self._bus.publish([event.id for event in events])
        except PublishError as e:
            logger.warning(
                "Failed to publish committed events",
                extra={"operation": operation, "event_ids": [str(i) for i in e.event_ids], "error": str(e)},
            )
        else:
            logger.debug("Published events", extra={"operation": operation, "count": len(events)})

    def _storage_error(self, operation: str, error: RepositoryError) -> InternalServerException:
        logger.error(
            "Storage read failed",
            exc_info=error,
            extra={"operation": operation, "corrupted_data": isinstance(error, CorruptedDataError)},
        )
        return InternalServerException(extra={"operation": operation})
