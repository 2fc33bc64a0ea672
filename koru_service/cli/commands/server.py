"""Commands running the API and the event worker."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import click

from koru_service.cli.utils import error, info
from koru_service.core.settings import get_settings
from koru_service.main import run


def _run(main: Coroutine[Any, Any, None]) -> None:
    try:
        asyncio.run(main)
    except Exception as e:
        error(f"Stopped: {e}")
        raise SystemExit(1) from e


@click.command()
@click.option("--host", default=None, help="Host to bind (default: from settings)")
@click.option("--port", default=None, type=int, help="Port to bind (default: from settings)")
@click.option(
    "--with-worker/--without-worker",
    default=True,
    help="Run the event worker in the same process",
)
def serve(host: str | None, port: int | None, with_worker: bool) -> None:
    """Run the HTTP API."""
    settings = get_settings()
    overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update={"app": settings.app.model_copy(update=overrides)})

    info(f"Serving on {settings.app.host}:{settings.app.port}")
    if with_worker:
        info(f"Event worker enabled ({settings.event_bus.backend} bus)")
    elif settings.event_bus.backend == "memory":
        error("The in-process bus has no consumer without the worker; events will stay unprocessed")
    _run(run(settings, worker=with_worker))


@click.command()
def worker() -> None:
    """Run only the event worker."""
    settings = get_settings()
    if settings.event_bus.backend == "memory":
        error("A standalone worker needs a shared bus; set EVENT_BUS_BACKEND=redis")
        raise SystemExit(1)
    info(f"Listening on channel {settings.event_bus.channel}")
    _run(run(settings, api=False))
