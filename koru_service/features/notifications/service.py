"""Notification transport contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID


class NotificationError(Exception):
    """A notification could not be delivered to one recipient."""

    def __init__(self, message: str, recipient_id: UUID | None = None) -> None:
        super().__init__(message)
        self.recipient_id = recipient_id


@runtime_checkable
class NotificationService(Protocol):
    async def send(self, recipient_id: UUID, title: str, body: str) -> None:
        """Deliver one notification.

        Raises:
            NotificationError: Delivery failed.
        """
        ...
