"""SQLAlchemy session management and the relational session adapter."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSessionTransaction,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..cancellation import CancellationToken, raise_if_cancelled
from ..core.config import Settings, get_settings
from ..uow import UnitOfWork

logger = logging.getLogger(__name__)


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    """Build an ``AsyncEngine`` from the configured database URL."""
    settings = settings or get_settings()
    connect_args: dict[str, Any] = {}
    if settings.is_sqlite:
        # Driver-level busy timeout; lock contention surfaces as OperationalError.
        connect_args["timeout"] = settings.db_lock_timeout_seconds
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory producing SQLModel ``AsyncSession`` objects."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all database tables (primarily for tests and local development)."""
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


class SQLAlchemyTransaction:
    """Transaction handle backed by an ``AsyncSessionTransaction``."""

    def __init__(self, transaction: AsyncSessionTransaction) -> None:
        self._transaction = transaction
        self._disposed = False

    @property
    def is_active(self) -> bool:
        return not self._disposed and self._transaction.is_active

    async def commit(self, cancellation: CancellationToken | None = None) -> None:
        raise_if_cancelled(cancellation)
        await self._transaction.commit()

    async def rollback(self) -> None:
        await self._transaction.rollback()

    async def dispose(self) -> None:
        """Release the handle; an unfinished transaction has its work discarded."""
        if self._disposed:
            return
        self._disposed = True
        if self._transaction.is_active:
            await self._transaction.rollback()


class SQLAlchemySession:
    """Expose an ``AsyncSession`` through the transactional session contract."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._transaction: SQLAlchemyTransaction | None = None
        self._disposed = False

    @property
    def session(self) -> AsyncSession:
        """Return the wrapped SQLModel session."""
        return self._session

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add(self, instance: Any) -> None:
        self._session.add(instance)

    def is_relational(self) -> bool:
        return True

    async def begin_transaction(
        self, cancellation: CancellationToken | None = None
    ) -> SQLAlchemyTransaction:
        """Open a session transaction, adopting one the session already auto-began."""
        raise_if_cancelled(cancellation)
        existing = self._session.get_transaction()
        if existing is not None:
            transaction = SQLAlchemyTransaction(existing)
        else:
            transaction = SQLAlchemyTransaction(await self._session.begin())
        self._transaction = transaction
        return transaction

    async def save_changes(self, cancellation: CancellationToken | None = None) -> int:
        """Flush pending changes and return how many objects were written.

        Outside an explicit transaction the flush is committed straight away, so
        saving without a unit-of-work transaction still persists.
        """
        raise_if_cancelled(cancellation)
        affected = len(self._session.new) + len(self._session.dirty) + len(self._session.deleted)
        if self._transaction is not None and self._transaction.is_active:
            await self._session.flush()
        else:
            await self._session.commit()
        logger.debug("Saved %d pending change(s)", affected)
        return affected

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._transaction = None
        await self._session.close()


@asynccontextmanager
async def unit_of_work_scope(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    settings: Settings | None = None,
) -> AsyncIterator[UnitOfWork[SQLAlchemySession]]:
    """Yield a unit of work over a fresh session, disposing both on exit."""
    async with UnitOfWork(SQLAlchemySession(session_factory()), settings=settings) as unit_of_work:
        yield unit_of_work


__all__ = [
    "SQLAlchemySession",
    "SQLAlchemyTransaction",
    "create_engine",
    "create_session_factory",
    "init_db",
    "unit_of_work_scope",
]
