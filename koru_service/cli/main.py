"""Main CLI entry point for koru-service."""

import click

from koru_service.cli.commands import database, server
from koru_service.core.settings import get_settings
from koru_service.infra.logging import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="koru-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Koru service management commands.

    \b
    Quick Start:
      koru-service db upgrade     # Apply migrations
      koru-service serve          # API plus event worker
      koru-service worker         # Standalone worker (Redis bus)
    """
    ctx.ensure_object(dict)


cli.add_command(database.db)
cli.add_command(server.serve)
cli.add_command(server.worker)


def main() -> None:
    """Entry point for CLI."""
    settings = get_settings()
    setup_logging(settings.logging, service_name=settings.app.service_name)
    cli(obj={})


if __name__ == "__main__":
    main()
