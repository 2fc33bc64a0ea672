"""Router registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from koru_service.features.groups.router import router as groups_router
from koru_service.features.health.router import router as health_router
from koru_service.features.users.router import router as users_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from koru_service.core.settings import AppSettings


def setup_routers(app: FastAPI, app_settings: AppSettings) -> None:
    app.include_router(health_router)
    app.include_router(users_router, prefix=app_settings.api_prefix)
    app.include_router(groups_router, prefix=app_settings.api_prefix)
