"""Request-scoped access to the services built at startup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

from fastapi import Depends, Header, Request

from koru_service.features.groups.service import GroupService
from koru_service.features.notifications.devices import DeviceService
from koru_service.features.users.service import UserService

if TYPE_CHECKING:
    from koru_service.core.events.bus import EventBus
    from koru_service.core.store.base import Store


@dataclass
class ServiceContainer:
    """Everything the HTTP layer needs, sharing one store and one bus."""

    store: Store
    users: UserService
    groups: GroupService
    devices: DeviceService

    @classmethod
    def build(cls, store: Store, bus: EventBus) -> ServiceContainer:
        devices = DeviceService(store)
        return cls(
            store=store,
            users=UserService(store, bus, devices),
            groups=GroupService(store, bus),
            devices=devices,
        )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_user_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> UserService:
    return services.users


def get_group_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> GroupService:
    return services.groups


def get_device_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> DeviceService:
    return services.devices


ServicesDep = Annotated[ServiceContainer, Depends(get_services)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
GroupServiceDep = Annotated[GroupService, Depends(get_group_service)]
DeviceServiceDep = Annotated[DeviceService, Depends(get_device_service)]

# Authentication is handled upstream; the gateway forwards the user id
CurrentUserId = Annotated[UUID, Header(alias="X-User-Id")]
