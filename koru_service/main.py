"""Process entry point running the HTTP API and the event worker together.

Both halves share one store and one event transport. Whichever half stops
first takes the other down with it; shared resources are closed on exit.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import uvicorn

from koru_service.app.dependencies import ServiceContainer
from koru_service.app.main import create_app
from koru_service.core.settings import Settings, get_settings
from koru_service.core.store.base import Store
from koru_service.infra.events import EventTransport, build_event_transport
from koru_service.infra.logging import setup_logging
from koru_service.infra.notifications import PushyNotificationService, build_notification_service
from koru_service.infra.store import build_store
from koru_service.workers import Worker

if TYPE_CHECKING:
    from koru_service.features.notifications.service import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Resources shared by the API and the worker."""

    settings: Settings
    store: Store
    transport: EventTransport
    worker: Worker
    services: ServiceContainer
    notifications: NotificationService | None = None

    @classmethod
    async def build(cls, settings: Settings) -> Runtime:
        store = await build_store(settings.store)
        transport = build_event_transport(settings.event_bus, store)
        notifications = build_notification_service(settings.notification, store)
        return cls(
            settings=settings,
            store=store,
            transport=transport,
            worker=Worker.build(transport.listener, store, notifications),
            services=ServiceContainer.build(store, transport.bus),
            notifications=notifications,
        )

    async def close(self) -> None:
        if isinstance(self.notifications, PushyNotificationService):
            await self.notifications.close()
        await self.transport.close()
        await self.store.close()


def _server(runtime: Runtime) -> uvicorn.Server:
    app_settings = runtime.settings.app
    app = create_app(runtime.services, app_settings)
    config = uvicorn.Config(
        app,
        host=app_settings.host,
        port=app_settings.port,
        log_config=None,
        access_log=app_settings.debug,
    )
    return uvicorn.Server(config)


async def _race(tasks: dict[str, asyncio.Task[None]]) -> BaseException | None:
    """Wait for the first task to finish, cancel the rest and return its error, if any."""
    done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_COMPLETED)
    failure: BaseException | None = None
    for name, task in tasks.items():
        if task not in done:
            continue
        if task.cancelled():
            logger.warning("%s was cancelled", name)
        elif (exc := task.exception()) is not None:
            logger.error("%s stopped with an error", name, exc_info=exc)
            failure = failure or exc
        else:
            logger.info("%s exited", name)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    return failure


async def run(settings: Settings | None = None, *, api: bool = True, worker: bool = True) -> None:
    """Run the API, the worker or both until one of them stops.

    Raises:
        Exception: The error that stopped the first task, re-raised once
            shared resources are closed.
    """
    settings = settings or get_settings()
    runtime = await Runtime.build(settings)
    tasks: dict[str, asyncio.Task[None]] = {}
    try:
        if api:
            tasks["api"] = asyncio.create_task(_server(runtime).serve(), name="api")
        if worker:
            tasks["worker"] = asyncio.create_task(runtime.worker.run(), name="worker")
        failure = await _race(tasks)
    finally:
        await runtime.close()
    if failure is not None:
        raise failure


def main() -> None:
    settings = get_settings()
    setup_logging(settings.logging, service_name=settings.app.service_name)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
