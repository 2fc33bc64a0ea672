from __future__ import annotations

from dataclasses import dataclass
import logging
from uuid import UUID

from koru_service.features.notifications.service import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentNotification:
    recipient_id: UUID
    title: str
    body: str


class InMemoryNotificationService:
    """Records notifications instead of delivering them.

    Recipients listed in ``failing`` make ``send`` raise.
    """

    def __init__(self, failing: set[UUID] | None = None) -> None:
        self.sent: list[SentNotification] = []
        self.failing = failing or set()

    async def send(self, recipient_id: UUID, title: str, body: str) -> None:
        if recipient_id in self.failing:
            raise NotificationError("Recipient unreachable", recipient_id)
        self.sent.append(SentNotification(recipient_id, title, body))
        logger.debug("Recorded notification", extra={"recipient_id": str(recipient_id)})
