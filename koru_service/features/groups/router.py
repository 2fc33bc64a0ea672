"""Group endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from koru_service.app.dependencies import CurrentUserId, GroupServiceDep  # noqa: TC001
from koru_service.features.groups.schemas import (
    ChangeColorRequest,
    CreateGroupRequest,
    ExpenseRequest,
    ExpenseResponse,
    GroupResponse,
    JoinGroupRequest,
    MemberResponse,
    SettlementResponse,
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    body: CreateGroupRequest, user_id: CurrentUserId, service: GroupServiceDep,
) -> GroupResponse:
    group = await service.create_group(user_id, body.name, body.color)
    return GroupResponse.from_group(group)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: UUID, user_id: CurrentUserId, service: GroupServiceDep) -> GroupResponse:
    return GroupResponse.from_group(await service.get_group(user_id, group_id))


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: UUID, user_id: CurrentUserId, service: GroupServiceDep) -> None:
    await service.delete_group(user_id, group_id)


@router.post("/{group_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def join_group(
    group_id: UUID, body: JoinGroupRequest, user_id: CurrentUserId, service: GroupServiceDep,
) -> MemberResponse:
    member = await service.join_group(user_id, group_id, body.color)
    return MemberResponse.from_member(member)


@router.put("/{group_id}/members/me/color", response_model=MemberResponse)
async def change_member_color(
    group_id: UUID, body: ChangeColorRequest, user_id: CurrentUserId, service: GroupServiceDep,
) -> MemberResponse:
    member = await service.change_member_color(user_id, group_id, body.color)
    return MemberResponse.from_member(member)


@router.get("/{group_id}/expenses", response_model=list[ExpenseResponse])
async def get_expenses(group_id: UUID, user_id: CurrentUserId, service: GroupServiceDep) -> list[ExpenseResponse]:
    return [ExpenseResponse.from_expense(e) for e in await service.get_expenses(user_id, group_id)]


@router.post("/{group_id}/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    group_id: UUID, body: ExpenseRequest, user_id: CurrentUserId, service: GroupServiceDep,
) -> ExpenseResponse:
    expense = await service.create_expense(user_id, group_id, body.title, body.amount)
    return ExpenseResponse.from_expense(expense)


@router.put("/{group_id}/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    group_id: UUID,
    expense_id: UUID,
    body: ExpenseRequest,
    user_id: CurrentUserId,
    service: GroupServiceDep,
) -> ExpenseResponse:
    expense = await service.update_expense(user_id, group_id, expense_id, body.title, body.amount)
    return ExpenseResponse.from_expense(expense)


@router.delete("/{group_id}/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    group_id: UUID, expense_id: UUID, user_id: CurrentUserId, service: GroupServiceDep,
) -> None:
    await service.delete_expense(user_id, group_id, expense_id)


@router.post("/{group_id}/settle", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def settle(group_id: UUID, user_id: CurrentUserId, service: GroupServiceDep) -> SettlementResponse:
    settlement = await service.settle(user_id, group_id)
    return SettlementResponse.from_settlement(settlement)
