"""SQLAlchemy repositories.

Writes use the session of the caller's :class:`SqlTransaction`; reads open
a short-lived session of their own so they only ever see committed rows.
Driver errors are re-raised as repository errors.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from koru_service.core.events.models import from_document, to_document, utc_now
from koru_service.core.exceptions import ValidationException
from koru_service.core.store.base import Transaction
from koru_service.core.store.exceptions import (
    CorruptedDataError,
    DeleteError,
    FetchError,
    InsertError,
    TransactionError,
    UpdateError,
)
from koru_service.domain.expense import Expense
from koru_service.domain.group import Group, GroupMember
from koru_service.domain.settlement import Settlement
from koru_service.domain.user import User
from koru_service.domain.values import MemberColor, Transaction as Transfer
from koru_service.infra.store.sql.models import (
    CredentialRow,
    DeviceRow,
    EventRow,
    ExpenseRow,
    GroupMemberRow,
    GroupRow,
    SettlementRow,
    UserRow,
)

if TYPE_CHECKING:
    from koru_service.core.events.models import GroupEvent, UserEvent


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps returned by SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SqlTransaction(Transaction):
    """Unit of work backed by one AsyncSession and its database transaction."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__()
        self.session = session


class _SqlRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self.sessions = sessions

    @staticmethod
    def _session(tx: Transaction) -> AsyncSession:
        if not isinstance(tx, SqlTransaction):
            msg = "Transaction does not belong to the SQL store"
            raise TransactionError(msg)
        tx.ensure_active()
        return tx.session


class SqlUserRepository(_SqlRepository):
    async def save(self, tx: Transaction, user: User) -> None:
        session = self._session(tx)
        try:
            await session.merge(
                UserRow(id=user.id, name=user.name, email=user.email, created_at=user.created_at),
            )
        except SQLAlchemyError as e:
            raise InsertError("Failed to save user", details={"user_id": str(user.id)}) from e

    async def delete(self, tx: Transaction, user_id: UUID) -> None:
        session = self._session(tx)
        try:
            await session.execute(delete(UserRow).where(UserRow.id == user_id))
        except SQLAlchemyError as e:
            raise DeleteError("Failed to delete user", details={"user_id": str(user_id)}) from e

    async def find(self, user_id: UUID) -> User | None:
        try:
            async with self.sessions() as session:
                row = await session.get(UserRow, user_id)
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch user", details={"user_id": str(user_id)}) from e
        return self._to_user(row) if row else None

    async def find_by_email(self, email: str) -> User | None:
        try:
            async with self.sessions() as session:
                row = await session.scalar(select(UserRow).where(UserRow.email == email.lower()))
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch user by email") from e
        return self._to_user(row) if row else None

    @staticmethod
    def _to_user(row: UserRow) -> User:
        return User(id=row.id, name=row.name, email=row.email, created_at=as_utc(row.created_at))


class SqlCredentialRepository(_SqlRepository):
    async def save(self, tx: Transaction, email: str, password_hash: str) -> None:
        session = self._session(tx)
        try:
            await session.merge(CredentialRow(email=email.lower(), password_hash=password_hash))
        except SQLAlchemyError as e:
            raise InsertError("Failed to save credentials") from e

    async def delete(self, tx: Transaction, email: str) -> None:
        session = self._session(tx)
        try:
            await session.execute(delete(CredentialRow).where(CredentialRow.email == email.lower()))
        except SQLAlchemyError as e:
            raise DeleteError("Failed to delete credentials") from e

    async def find(self, email: str) -> str | None:
        try:
            async with self.sessions() as session:
                row = await session.get(CredentialRow, email.lower())
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch credentials") from e
        if row is None:
            return None
        if not row.password_hash:
            raise CorruptedDataError("Stored password hash is empty", details={"email": email})
        return row.password_hash


class SqlDeviceRepository(_SqlRepository):
    async def save(self, user_id: UUID, device_id: str) -> None:
        try:
            async with self.sessions.begin() as session:
                await session.merge(DeviceRow(user_id=user_id, device_id=device_id))
        except SQLAlchemyError as e:
            raise InsertError("Failed to save device", details={"user_id": str(user_id)}) from e

    async def find(self, user_id: UUID) -> str | None:
        try:
            async with self.sessions() as session:
                row = await session.get(DeviceRow, user_id)
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch device", details={"user_id": str(user_id)}) from e
        return row.device_id if row else None

    async def remove(self, user_id: UUID) -> None:
        try:
            async with self.sessions.begin() as session:
                await session.execute(delete(DeviceRow).where(DeviceRow.user_id == user_id))
        except SQLAlchemyError as e:
            raise DeleteError("Failed to remove device", details={"user_id": str(user_id)}) from e


class SqlGroupRepository(_SqlRepository):
    async def save(self, tx: Transaction, group: Group) -> None:
        session = self._session(tx)
        try:
            await session.merge(
                GroupRow(
                    id=group.id,
                    name=group.name,
                    admin_id=group.admin_id,
                    created_at=group.created_at,
                ),
            )
            for member in group.members:
                await session.merge(
                    GroupMemberRow(
                        group_id=group.id,
                        user_id=member.id,
                        name=member.name,
                        email=member.email,
                        is_admin=member.is_admin,
                        color=str(member.color),
                        joined_at=member.joined_at,
                    ),
                )
        except SQLAlchemyError as e:
            raise InsertError("Failed to save group", details={"group_id": str(group.id)}) from e

    async def delete(self, tx: Transaction, group_id: UUID) -> None:
        session = self._session(tx)
        try:
            await session.execute(delete(GroupMemberRow).where(GroupMemberRow.group_id == group_id))
            await session.execute(delete(GroupRow).where(GroupRow.id == group_id))
        except SQLAlchemyError as e:
            raise DeleteError("Failed to delete group", details={"group_id": str(group_id)}) from e

    async def find(self, group_id: UUID) -> Group | None:
        try:
            async with self.sessions() as session:
                row = await session.get(GroupRow, group_id)
                if row is None:
                    return None
                members = (
                    await session.scalars(
                        select(GroupMemberRow)
                        .where(GroupMemberRow.group_id == group_id)
                        .order_by(GroupMemberRow.joined_at),
                    )
                ).all()
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch group", details={"group_id": str(group_id)}) from e
        return Group(
            id=row.id,
            name=row.name,
            admin_id=row.admin_id,
            created_at=as_utc(row.created_at),
            members=[self._to_member(m) for m in members],
        )

    @staticmethod
    def _to_member(row: GroupMemberRow) -> GroupMember:
        try:
            color = MemberColor.parse(row.color)
        except ValidationException as e:
            raise CorruptedDataError(
                "Stored member color is invalid",
                details={"group_id": str(row.group_id), "color": row.color},
            ) from e
        return GroupMember(
            id=row.user_id,
            group_id=row.group_id,
            name=row.name,
            email=row.email,
            is_admin=row.is_admin,
            color=color,
            joined_at=as_utc(row.joined_at),
        )


class SqlExpenseRepository(_SqlRepository):
    async def save(self, tx: Transaction, expense: Expense) -> None:
        session = self._session(tx)
        try:
            await session.merge(
                ExpenseRow(
                    id=expense.id,
                    group_id=expense.group_id,
                    member_id=expense.member_id,
                    title=expense.title,
                    amount=expense.amount,
                    created_at=expense.created_at,
                    modified_at=expense.modified_at,
                    settled=expense.settled,
                ),
            )
        except SQLAlchemyError as e:
            raise InsertError("Failed to save expense", details={"expense_id": str(expense.id)}) from e

    async def delete(self, tx: Transaction, expense_id: UUID) -> None:
        session = self._session(tx)
        try:
            await session.execute(delete(ExpenseRow).where(ExpenseRow.id == expense_id))
        except SQLAlchemyError as e:
            raise DeleteError("Failed to delete expense", details={"expense_id": str(expense_id)}) from e

    async def find(self, expense_id: UUID) -> Expense | None:
        try:
            async with self.sessions() as session:
                row = await session.get(ExpenseRow, expense_id)
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch expense", details={"expense_id": str(expense_id)}) from e
        return self._to_expense(row) if row else None

    async def find_unsettled(self, group_id: UUID) -> list[Expense]:
        try:
            async with self.sessions() as session:
                rows = (
                    await session.scalars(
                        select(ExpenseRow)
                        .where(ExpenseRow.group_id == group_id, ExpenseRow.settled.is_(False))
                        .order_by(ExpenseRow.created_at),
                    )
                ).all()
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch expenses", details={"group_id": str(group_id)}) from e
        return [self._to_expense(row) for row in rows]

    @staticmethod
    def _to_expense(row: ExpenseRow) -> Expense:
        return Expense(
            id=row.id,
            group_id=row.group_id,
            member_id=row.member_id,
            title=row.title,
            amount=row.amount,
            created_at=as_utc(row.created_at),
            modified_at=as_utc(row.modified_at) if row.modified_at else None,
            settled=row.settled,
        )


class SqlSettlementRepository(_SqlRepository):
    async def save(self, tx: Transaction, settlement: Settlement) -> None:
        session = self._session(tx)
        try:
            await session.merge(
                SettlementRow(
                    id=settlement.id,
                    group_id=settlement.group_id,
                    start_date=settlement.start_date,
                    end_date=settlement.end_date,
                    transactions=[t.model_dump(mode="json") for t in settlement.transactions],
                    expense_ids=[str(expense_id) for expense_id in settlement.expense_ids],
                ),
            )
        except SQLAlchemyError as e:
            raise InsertError(
                "Failed to save settlement", details={"settlement_id": str(settlement.id)},
            ) from e

    async def find(self, settlement_id: UUID) -> Settlement | None:
        try:
            async with self.sessions() as session:
                row = await session.get(SettlementRow, settlement_id)
        except SQLAlchemyError as e:
            raise FetchError(
                "Failed to fetch settlement", details={"settlement_id": str(settlement_id)},
            ) from e
        return self._to_settlement(row) if row else None

    async def find_last(self, group_id: UUID) -> Settlement | None:
        try:
            async with self.sessions() as session:
                row = await session.scalar(
                    select(SettlementRow)
                    .where(SettlementRow.group_id == group_id)
                    .order_by(SettlementRow.end_date.desc())
                    .limit(1),
                )
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch settlement", details={"group_id": str(group_id)}) from e
        return self._to_settlement(row) if row else None

    @staticmethod
    def _to_settlement(row: SettlementRow) -> Settlement:
        try:
            transactions = [Transfer.model_validate(t) for t in row.transactions]
            expense_ids = [UUID(expense_id) for expense_id in row.expense_ids]
        except (ValueError, TypeError) as e:
            raise CorruptedDataError(
                "Stored settlement cannot be decoded", details={"settlement_id": str(row.id)},
            ) from e
        return Settlement(
            id=row.id,
            group_id=row.group_id,
            start_date=as_utc(row.start_date) if row.start_date else None,
            end_date=as_utc(row.end_date),
            transactions=transactions,
            expense_ids=expense_ids,
        )


class SqlEventRepository(_SqlRepository):
    async def save(self, tx: Transaction, events: Sequence[UserEvent | GroupEvent]) -> None:
        session = self._session(tx)
        try:
            session.add_all(
                EventRow(
                    id=event.id,
                    occurred_at=event.occurred_at,
                    processed_at=None,
                    event_data=to_document(event),
                )
                for event in events
            )
            await session.flush()
        except SQLAlchemyError as e:
            raise InsertError("Failed to save events", details={"count": len(events)}) from e

    async def find(self, event_id: UUID) -> UserEvent | GroupEvent | None:
        try:
            async with self.sessions() as session:
                row = await session.get(EventRow, event_id)
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch event", details={"event_id": str(event_id)}) from e
        if row is None:
            return None
        return from_document(row.event_data)

    async def mark_processed(self, event_id: UUID) -> None:
        try:
            async with self.sessions.begin() as session:
                row = await session.get(EventRow, event_id)
                if row is None:
                    raise FetchError("Event not found", details={"event_id": str(event_id)})
                if row.processed_at is None:
                    row.processed_at = utc_now()
        except SQLAlchemyError as e:
            raise UpdateError(
                "Failed to mark event processed", details={"event_id": str(event_id)},
            ) from e

    async def processed_at(self, event_id: UUID) -> datetime | None:
        try:
            async with self.sessions() as session:
                row = await session.get(EventRow, event_id)
        except SQLAlchemyError as e:
            raise FetchError("Failed to fetch event", details={"event_id": str(event_id)}) from e
        if row is None:
            raise FetchError("Event not found", details={"event_id": str(event_id)})
        return as_utc(row.processed_at) if row.processed_at else None
