"""Contracts between event producers, the transport and event consumers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from koru_service.core.events.models import GroupEvent, UserEvent


class PublishError(Exception):
    """The transport refused or failed to carry a batch of event ids.

    Never retried: the events are already committed to the log.
    """

    def __init__(self, message: str, event_ids: Sequence[UUID] = ()) -> None:
        super().__init__(message)
        self.event_ids = list(event_ids)


class EventHandlerError(Exception):
    """A processor failed to handle an event."""

    def __init__(self, message: str, event_id: UUID | None = None) -> None:
        super().__init__(message)
        self.event_id = event_id


@runtime_checkable
class EventBus(Protocol):
    """Producer side: announce that new events are in the log."""

    async def publish(self, event_ids: Sequence[UUID]) -> None:
        """Publish ids of committed events.

        Raises:
            PublishError: The transport failed.
        """
        ...


@runtime_checkable
class EventProcessor(Protocol):
    """Consumer-side handler invoked once per delivered event."""

    async def handle(self, event: UserEvent | GroupEvent) -> None:
        """Handle one event.

        Raises:
            EventHandlerError: The processor could not complete its work.
        """
        ...


@runtime_checkable
class EventListener(Protocol):
    """Consumer side: receive ids, fetch events and drive processors."""

    def register(self, processor: EventProcessor) -> None:
        """Add a processor; only valid before :meth:`listen` starts."""
        ...

    async def listen(self) -> None:
        """Consume for the lifetime of the process.

        Returns or raises only on unrecoverable transport failure.
        """
        ...
