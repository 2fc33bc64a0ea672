"""Group aggregate.

Every mutating method validates the acting user, changes state and appends
one :class:`GroupEvent` to ``events``. Nothing is persisted here; the
calling use case saves the aggregate and its pending events in one unit of
work.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from koru_service.core.events.models import (
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseModified,
    GroupCreated,
    GroupDeleted,
    GroupEvent,
    MemberColorChanged,
    MemberJoined,
    Settled,
    utc_now,
)
from koru_service.core.exceptions import ConflictException, ForbiddenException, NotFoundException
from koru_service.domain.expense import Expense
from koru_service.domain.settlement import Settlement
from koru_service.domain.user import User
from koru_service.domain.values import MemberColor, parse_name


@dataclass
class GroupMember:
    id: UUID
    group_id: UUID
    name: str
    email: str
    is_admin: bool
    color: MemberColor
    joined_at: datetime


@dataclass
class Group:
    id: UUID
    name: str
    admin_id: UUID
    created_at: datetime
    members: list[GroupMember] = field(default_factory=list)
    events: list[GroupEvent] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def create(cls, name: str, admin: User, color: MemberColor) -> Group:
        group_id = uuid4()
        now = utc_now()
        group = cls(
            id=group_id,
            name=parse_name(name),
            admin_id=admin.id,
            created_at=now,
            members=[
                GroupMember(
                    id=admin.id,
                    group_id=group_id,
                    name=admin.name,
                    email=admin.email,
                    is_admin=True,
                    color=color,
                    joined_at=now,
                )
            ],
        )
        group._record(admin.id, GroupCreated(name=group.name, color=color))
        return group

    # ──────────────────────────────────────────────────────────────
    # Membership
    # ──────────────────────────────────────────────────────────────

    def member(self, user_id: UUID) -> GroupMember | None:
        return next((m for m in self.members if m.id == user_id), None)

    def is_member(self, user_id: UUID) -> bool:
        return self.is_admin(user_id) or self.member(user_id) is not None

    def is_admin(self, user_id: UUID) -> bool:
        return user_id == self.admin_id

    def require_member(self, user_id: UUID) -> GroupMember:
        member = self.member(user_id)
        if member is None:
            raise ForbiddenException(
                detail="User is not a member of this group",
                extra={"group_id": str(self.id)},
            )
        return member

    def add_member(self, user: User, color: MemberColor) -> GroupMember:
        if self.is_member(user.id):
            raise ConflictException(
                detail="User is already a member of this group",
                extra={"group_id": str(self.id)},
            )
        member = GroupMember(
            id=user.id,
            group_id=self.id,
            name=user.name,
            email=user.email,
            is_admin=False,
            color=color,
            joined_at=utc_now(),
        )
        self.members.append(member)
        self._record(member.id, MemberJoined(color=color))
        return member

    def change_member_color(self, user_id: UUID, color: MemberColor) -> GroupMember:
        member = self.require_member(user_id)
        previous = member.color
        member.color = color
        self._record(member.id, MemberColorChanged(previous_color=previous, new_color=color))
        return member

    # ──────────────────────────────────────────────────────────────
    # Expenses
    # ──────────────────────────────────────────────────────────────

    def add_expense(self, user_id: UUID, title: str, amount: object) -> Expense:
        self.require_member(user_id)
        expense = Expense.create(self.id, user_id, title, amount)
        self._record(
            user_id,
            ExpenseCreated(
                id=expense.id,
                description=expense.title,
                amount=expense.amount,
                date=expense.created_at,
            ),
        )
        return expense

    def update_expense(
        self,
        user_id: UUID,
        expense: Expense | None,
        title: str,
        amount: object,
    ) -> Expense:
        expense = self._editable_expense(user_id, expense)
        previous_title, previous_amount = expense.title, expense.amount
        expense.update(title, amount)
        self._record(
            user_id,
            ExpenseModified(
                id=expense.id,
                previous_description=previous_title,
                new_description=expense.title,
                previous_amount=previous_amount,
                new_amount=expense.amount,
            ),
        )
        return expense

    def delete_expense(self, user_id: UUID, expense: Expense | None) -> Expense:
        expense = self._editable_expense(user_id, expense)
        self._record(user_id, ExpenseDeleted(id=expense.id))
        return expense

    def _editable_expense(self, user_id: UUID, expense: Expense | None) -> Expense:
        self.require_member(user_id)
        if expense is None or expense.group_id != self.id:
            raise NotFoundException(detail="Expense not found", type="expense-not-found")
        if not self.is_admin(user_id) and expense.member_id != user_id:
            raise ForbiddenException(detail="User is not admin or expense owner")
        if expense.settled:
            raise ConflictException(
                detail="Expense is already settled",
                extra={"expense_id": str(expense.id)},
            )
        return expense

    # ──────────────────────────────────────────────────────────────
    # Settlement and deletion
    # ──────────────────────────────────────────────────────────────

    def settle(
        self,
        user_id: UUID,
        expenses: Sequence[Expense],
        last_settlement: Settlement | None,
    ) -> Settlement:
        if not self.is_admin(user_id):
            raise ForbiddenException(detail="User is not group admin")
        settlement = Settlement.create(
            group_id=self.id,
            start_date=last_settlement.end_date if last_settlement else None,
            expenses=expenses,
            member_ids=[m.id for m in self.members],
        )
        self._record(
            user_id,
            Settled(
                id=settlement.id,
                start_date=settlement.start_date,
                end_date=settlement.end_date,
                transactions=tuple(settlement.transactions),
            ),
        )
        return settlement

    def delete(self, user_id: UUID) -> None:
        if not self.is_admin(user_id):
            raise ForbiddenException(detail="User is not group admin")
        self._record(user_id, GroupDeleted())

    def pull_events(self) -> list[GroupEvent]:
        events, self.events = self.events, []
        return events

    def _record(
        self,
        member_id: UUID,
        kind: GroupCreated
        | MemberJoined
        | MemberColorChanged
        | ExpenseCreated
        | ExpenseModified
        | ExpenseDeleted
        | Settled
        | GroupDeleted,
    ) -> None:
        self.events.append(GroupEvent(group_id=self.id, member_id=member_id, kind=kind))
