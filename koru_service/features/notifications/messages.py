"""Map group events to push notification text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, assert_never

from koru_service.core.events.models import (
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseModified,
    GroupCreated,
    GroupDeleted,
    MemberColorChanged,
    MemberJoined,
    Settled,
)

if TYPE_CHECKING:
    from koru_service.core.events.models import GroupEvent
    from koru_service.domain.group import Group, GroupMember

ALL_GOOD = "You are all good !"

# Kinds that produce a notification; everything else is silent
ANNOUNCED_KINDS = (MemberJoined, ExpenseCreated, Settled)


@dataclass(frozen=True)
class NotificationMessage:
    title: str
    body: str


def render_message(event: GroupEvent, group: Group, member: GroupMember) -> NotificationMessage | None:
    """Title and body for ``event``, or None when the kind is not announced."""
    match event.kind:
        case MemberJoined():
            return NotificationMessage(
                title=f"{member.name} joined group {group.name}",
                body=member.email,
            )
        case ExpenseCreated(description=description, amount=amount):
            return NotificationMessage(
                title=f"Expense from {member.name} in {group.name}",
                body=f"{description}: {amount}",
            )
        case Settled(transactions=transactions):
            names = {m.id: m.name for m in group.members}
            lines = [
                f"{names.get(t.from_id, 'Unknown')} owes {t.amount:.2f} to {names.get(t.to_id, 'Unknown')}"
                for t in transactions
            ]
            return NotificationMessage(
                title=f"Group {group.name} was settled",
                body="\n".join(lines) if lines else ALL_GOOD,
            )
        case (
            GroupCreated()
            | MemberColorChanged()
            | ExpenseModified()
            | ExpenseDeleted()
            | GroupDeleted()
        ):
            return None
        case _:
            assert_never(event.kind)
