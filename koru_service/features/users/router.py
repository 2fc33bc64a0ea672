"""Account and device endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from koru_service.app.dependencies import (  # noqa: TC001
    CurrentUserId,
    DeviceServiceDep,
    UserServiceDep,
)
from koru_service.features.users.schemas import DeviceRequest, RegisterRequest, UserResponse

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, service: UserServiceDep) -> UserResponse:
    user = await service.register(body.name, body.email, body.password_hash)
    return UserResponse.from_user(user)


@router.get("/users/me", response_model=UserResponse)
async def get_me(user_id: CurrentUserId, service: UserServiceDep) -> UserResponse:
    return UserResponse.from_user(await service.get(user_id))


@router.put("/devices", status_code=status.HTTP_204_NO_CONTENT)
async def register_device(body: DeviceRequest, user_id: CurrentUserId, devices: DeviceServiceDep) -> None:
    await devices.register(user_id, body.device_id)


@router.delete("/devices", status_code=status.HTTP_204_NO_CONTENT)
async def remove_device(user_id: CurrentUserId, devices: DeviceServiceDep) -> None:
    await devices.remove(user_id)
