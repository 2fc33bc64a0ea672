"""Database management commands."""

from pathlib import Path

from alembic import command
from alembic.config import Config
import click

from koru_service.cli.utils import coro, error, info, success
from koru_service.core.settings import get_store_settings
from koru_service.core.store.exceptions import RepositoryError
from koru_service.infra.store.sql import SqlStore

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _alembic_config() -> Config:
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return config


def _require_sql() -> None:
    settings = get_store_settings()
    if settings.backend != "postgres" or not settings.is_configured:
        error("Database commands need STORE_BACKEND=postgres and STORE_DATABASE_URL")
        raise SystemExit(1)


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Create every table directly from the models."""
    _require_sql()
    store = SqlStore.from_settings(get_store_settings())
    try:
        await store.create_schema()
    except RepositoryError as exc:
        error(f"Schema creation failed: {exc}")
        raise SystemExit(1) from exc
    finally:
        await store.close()
    success("Schema created")


@db.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Apply migrations up to REVISION."""
    _require_sql()
    info(f"Upgrading database to {revision}")
    command.upgrade(_alembic_config(), revision)
    success("Database upgraded")


@db.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Revert migrations down to REVISION."""
    _require_sql()
    command.downgrade(_alembic_config(), revision)
    success(f"Database downgraded to {revision}")
