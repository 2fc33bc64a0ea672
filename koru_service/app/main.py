"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from koru_service.app.exception_handlers import configure_exception_handlers
from koru_service.app.router import setup_routers
from koru_service.core.settings import get_app_settings

if TYPE_CHECKING:
    from koru_service.app.dependencies import ServiceContainer
    from koru_service.core.settings import AppSettings


def create_app(services: ServiceContainer, app_settings: AppSettings | None = None) -> FastAPI:
    """Create the application around already-built services.

    The store and bus are owned by the process entry point, which also runs
    the worker; the app only borrows them.
    """
    app_settings = app_settings or get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
    )
    app.state.services = services

    configure_exception_handlers(app)
    setup_routers(app, app_settings)
    return app
