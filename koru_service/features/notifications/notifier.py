"""Event processor turning group activity into push notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.core.events.bus import EventHandlerError
from koru_service.core.events.models import GroupEvent, UserEvent
from koru_service.core.store.exceptions import RepositoryError
from koru_service.features.notifications.messages import ANNOUNCED_KINDS, render_message
from koru_service.features.notifications.service import NotificationError

if TYPE_CHECKING:
    from koru_service.core.store.base import Store
    from koru_service.features.notifications.service import NotificationService

logger = logging.getLogger(__name__)


class Notifier:
    """Notify every group member except the one who acted.

    User events and group kinds without a message are ignored. All
    recipients are attempted even when some sends fail; the failures are
    then reported together as one :class:`EventHandlerError`.
    """

    def __init__(self, store: Store, notifications: NotificationService) -> None:
        self._store = store
        self._notifications = notifications

    async def handle(self, event: UserEvent | GroupEvent) -> None:
        match event:
            case UserEvent():
                return
            case GroupEvent():
                await self._handle_group_event(event)

    async def _handle_group_event(self, event: GroupEvent) -> None:
        if not isinstance(event.kind, ANNOUNCED_KINDS):
            return

        try:
            group = await self._store.groups.find(event.group_id)
        except RepositoryError as e:
            raise EventHandlerError("Failed to load group", event.id) from e
        if group is None:
            raise EventHandlerError(f"Group {event.group_id} not found", event.id)

        member = group.member(event.member_id)
        if member is None:
            raise EventHandlerError(f"Member {event.member_id} not found in group", event.id)

        message = render_message(event, group, member)
        if message is None:
            return

        recipients = [m.id for m in group.members if m.id != member.id]
        failures: list[NotificationError] = []
        for recipient_id in recipients:
            try:
                await self._notifications.send(recipient_id, message.title, message.body)
            except NotificationError as e:
                logger.warning(
                    "Notification failed",
                    extra={"recipient_id": str(recipient_id), "error": str(e)},
                )
                failures.append(e)

        logger.info(
            "Group notifications sent",
            extra={
                "kind": event.kind.type,
                "recipients": len(recipients),
                "failed": len(failures),
            },
        )
        if failures:
            raise EventHandlerError(
                f"{len(failures)} of {len(recipients)} notifications failed",
                event.id,
            )
