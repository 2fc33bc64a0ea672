from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from koru_service.domain.user import User


class RegisterRequest(BaseModel):
    name: str = Field(description="Display name")
    email: str = Field(description="Login email, unique")
    password_hash: str | None = Field(default=None, description="Hash computed by the auth gateway")


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


class DeviceRequest(BaseModel):
    device_id: str = Field(min_length=1, max_length=255, description="Push provider device token")
