"""Relational store backend (PostgreSQL via psycopg, SQLite in tests)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from koru_service.core.store.base import Store, Transaction
from koru_service.core.store.exceptions import TransactionError
from koru_service.infra.store.sql.models import Base
from koru_service.infra.store.sql.repositories import (
    SqlCredentialRepository,
    SqlDeviceRepository,
    SqlEventRepository,
    SqlExpenseRepository,
    SqlGroupRepository,
    SqlSettlementRepository,
    SqlTransaction,
    SqlUserRepository,
)

if TYPE_CHECKING:
    from koru_service.core.settings.store import StoreSettings

logger = logging.getLogger(__name__)


def create_engine(settings: StoreSettings) -> AsyncEngine:
    """Build the async engine; pool options only apply to server databases."""
    url = settings.get_database_url()
    options: dict[str, Any] = {"echo": settings.echo}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=settings.pool_pre_ping,
        )
    return create_async_engine(url, **options)


class SqlStore(Store):
    """Store over a SQLAlchemy async engine; one session per unit of work."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.sessions = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._users = SqlUserRepository(self.sessions)
        self._credentials = SqlCredentialRepository(self.sessions)
        self._devices = SqlDeviceRepository(self.sessions)
        self._groups = SqlGroupRepository(self.sessions)
        self._expenses = SqlExpenseRepository(self.sessions)
        self._settlements = SqlSettlementRepository(self.sessions)
        self._events = SqlEventRepository(self.sessions)

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> SqlStore:
        return cls(create_engine(settings))

    async def create_schema(self) -> None:
        """Create missing tables. Idempotent."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise TransactionError("Failed to create schema") from e
        logger.info("Database schema ensured")

    async def begin_transaction(self) -> SqlTransaction:
        session = self.sessions()
        try:
            await session.begin()
        except SQLAlchemyError as e:
            await session.close()
            raise TransactionError("Failed to begin transaction") from e
        return SqlTransaction(session)

    async def commit(self, tx: Transaction) -> None:
        if not isinstance(tx, SqlTransaction):
            msg = "Transaction does not belong to the SQL store"
            raise TransactionError(msg)
        tx.ensure_active()
        try:
            await tx.session.commit()
        except SQLAlchemyError as e:
            await tx.session.rollback()
            raise TransactionError("Failed to commit transaction") from e
        finally:
            tx.close()
            await tx.session.close()

    async def rollback(self, tx: Transaction) -> None:
        if not tx.is_active:
            return
        tx.close()
        if isinstance(tx, SqlTransaction):
            try:
                await tx.session.rollback()
            except SQLAlchemyError as e:
                raise TransactionError("Failed to roll back transaction") from e
            finally:
                await tx.session.close()

    async def close(self) -> None:
        await self.engine.dispose()

    @property
    def users(self) -> SqlUserRepository:
        return self._users

    @property
    def credentials(self) -> SqlCredentialRepository:
        return self._credentials

    @property
    def devices(self) -> SqlDeviceRepository:
        return self._devices

    @property
    def groups(self) -> SqlGroupRepository:
        return self._groups

    @property
    def expenses(self) -> SqlExpenseRepository:
        return self._expenses

    @property
    def settlements(self) -> SqlSettlementRepository:
        return self._settlements

    @property
    def events(self) -> SqlEventRepository:
        return self._events
