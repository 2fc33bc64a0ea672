"""Request and response models for group endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from koru_service.domain.expense import Expense
from koru_service.domain.group import Group, GroupMember
from koru_service.domain.settlement import Settlement


class CreateGroupRequest(BaseModel):
    name: str = Field(description="Group name, not empty")
    color: str | None = Field(default=None, description="Admin color as 'r,g,b'; defaults to 0,255,0")


class JoinGroupRequest(BaseModel):
    color: str | None = Field(default=None, description="Member color as 'r,g,b'")


class ChangeColorRequest(BaseModel):
    color: str = Field(description="New member color as 'r,g,b'")


class ExpenseRequest(BaseModel):
    title: str = Field(description="What was paid for")
    amount: Decimal = Field(description="Amount paid, greater than 0")


class MemberResponse(BaseModel):
    id: UUID
    name: str
    email: str
    is_admin: bool
    color: str
    joined_at: datetime

    @classmethod
    def from_member(cls, member: GroupMember) -> MemberResponse:
        return cls(
            id=member.id,
            name=member.name,
            email=member.email,
            is_admin=member.is_admin,
            color=str(member.color),
            joined_at=member.joined_at,
        )


class GroupResponse(BaseModel):
    id: UUID
    name: str
    admin_id: UUID
    created_at: datetime
    members: list[MemberResponse]

    @classmethod
    def from_group(cls, group: Group) -> GroupResponse:
        return cls(
            id=group.id,
            name=group.name,
            admin_id=group.admin_id,
            created_at=group.created_at,
            members=[MemberResponse.from_member(m) for m in group.members],
        )


class ExpenseResponse(BaseModel):
    id: UUID
    member_id: UUID
    title: str
    amount: Decimal
    created_at: datetime
    modified_at: datetime | None

    @classmethod
    def from_expense(cls, expense: Expense) -> ExpenseResponse:
        return cls(
            id=expense.id,
            member_id=expense.member_id,
            title=expense.title,
            amount=expense.amount,
            created_at=expense.created_at,
            modified_at=expense.modified_at,
        )


class TransactionResponse(BaseModel):
    from_id: UUID
    to_id: UUID
    amount: Decimal


class SettlementResponse(BaseModel):
    id: UUID
    start_date: datetime | None
    end_date: datetime
    transactions: list[TransactionResponse]

    @classmethod
    def from_settlement(cls, settlement: Settlement) -> SettlementResponse:
        return cls(
            id=settlement.id,
            start_date=settlement.start_date,
            end_date=settlement.end_date,
            transactions=[
                TransactionResponse(from_id=t.from_id, to_id=t.to_id, amount=t.amount)
                for t in settlement.transactions
            ],
        )
