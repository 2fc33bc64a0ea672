"""Group, membership, expense and settlement use cases.

Every operation validates its input, loads the aggregate, lets it record
the resulting events and persists entities plus events in one unit of work.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from koru_service.core.exceptions import NotFoundException
from koru_service.core.store.exceptions import RepositoryError
from koru_service.domain.group import Group
from koru_service.domain.values import MemberColor
from koru_service.features.base import EventPublishingService

if TYPE_CHECKING:
    from uuid import UUID

    from koru_service.domain.expense import Expense
    from koru_service.domain.group import GroupMember
    from koru_service.domain.settlement import Settlement
    from koru_service.domain.user import User

logger = logging.getLogger(__name__)


class GroupService(EventPublishingService):
    async def create_group(self, user_id: UUID, name: str, color: str | None = None) -> Group:
        member_color = MemberColor.parse(color)
        user = await self._load_user(user_id)
        group = Group.create(name, user, member_color)

        async with self.unit_of_work("create_group", group.pull_events()) as tx:
            await self._store.groups.save(tx, group)
        logger.info("Group created", extra={"group_id": str(group.id), "user_id": str(user_id)})
        return group

    async def join_group(self, user_id: UUID, group_id: UUID, color: str | None = None) -> GroupMember:
        member_color = MemberColor.parse(color)
        user = await self._load_user(user_id)
        group = await self._load_group(group_id)
        member = group.add_member(user, member_color)

        async with self.unit_of_work("join_group", group.pull_events()) as tx:
            await self._store.groups.save(tx, group)
        return member

    async def change_member_color(self, user_id: UUID, group_id: UUID, color: str) -> GroupMember:
        member_color = MemberColor.parse(color)
        group = await self._load_group(group_id)
        member = group.change_member_color(user_id, member_color)

        async with self.unit_of_work("change_member_color", group.pull_events()) as tx:
            await self._store.groups.save(tx, group)
        return member

    async def create_expense(self, user_id: UUID, group_id: UUID, title: str, amount: object) -> Expense:
        group = await self._load_group(group_id)
        expense = group.add_expense(user_id, title, amount)

        async with self.unit_of_work("create_expense", group.pull_events()) as tx:
            await self._store.expenses.save(tx, expense)
        return expense

    async def update_expense(
        self,
        user_id: UUID,
        group_id: UUID,
        expense_id: UUID,
        title: str,
        amount: object,
    ) -> Expense:
        group = await self._load_group(group_id)
        expense = await self._find_expense(expense_id)
        expense = group.update_expense(user_id, expense, title, amount)

        async with self.unit_of_work("update_expense", group.pull_events()) as tx:
            await self._store.expenses.save(tx, expense)
        return expense

    async def delete_expense(self, user_id: UUID, group_id: UUID, expense_id: UUID) -> None:
        group = await self._load_group(group_id)
        expense = await self._find_expense(expense_id)
        expense = group.delete_expense(user_id, expense)

        async with self.unit_of_work("delete_expense", group.pull_events()) as tx:
            await self._store.expenses.delete(tx, expense.id)

    async def settle(self, user_id: UUID, group_id: UUID) -> Settlement:
        group = await self._load_group(group_id)
        try:
            expenses = await self._store.expenses.find_unsettled(group_id)
            last_settlement = await self._store.settlements.find_last(group_id)
        except RepositoryError as e:
            raise self._storage_error("settle", e) from e
        settlement = group.settle(user_id, expenses, last_settlement)

        async with self.unit_of_work("settle", group.pull_events()) as tx:
            await self._store.settlements.save(tx, settlement)
            for expense in expenses:
                await self._store.expenses.save(tx, expense)
        logger.info(
            "Group settled",
            extra={"group_id": str(group_id), "transactions": len(settlement.transactions)},
        )
        return settlement

    async def delete_group(self, user_id: UUID, group_id: UUID) -> None:
        group = await self._load_group(group_id)
        group.delete(user_id)

        async with self.unit_of_work("delete_group", group.pull_events()) as tx:
            await self._store.groups.delete(tx, group_id)
        logger.info("Group deleted", extra={"group_id": str(group_id)})

    async def get_group(self, user_id: UUID, group_id: UUID) -> Group:
        group = await self._load_group(group_id)
        group.require_member(user_id)
        return group

    async def get_expenses(self, user_id: UUID, group_id: UUID) -> list[Expense]:
        group = await self.get_group(user_id, group_id)
        try:
            return await self._store.expenses.find_unsettled(group.id)
        except RepositoryError as e:
            raise self._storage_error("get_expenses", e) from e

    async def _load_user(self, user_id: UUID) -> User:
        try:
            user = await self._store.users.find(user_id)
        except RepositoryError as e:
            raise self._storage_error("load_user", e) from e
        if user is None:
            raise NotFoundException(detail="User not found", type="user-not-found")
        return user

    async def _load_group(self, group_id: UUID) -> Group:
        try:
            group = await self._store.groups.find(group_id)
        except RepositoryError as e:
            raise self._storage_error("load_group", e) from e
        if group is None:
            raise NotFoundException(detail="Group not found", type="group-not-found")
        return group

    async def _find_expense(self, expense_id: UUID) -> Expense | None:
        try:
            return await self._store.expenses.find(expense_id)
        except RepositoryError as e:
            raise self._storage_error("load_expense", e) from e
