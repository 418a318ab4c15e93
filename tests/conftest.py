from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from unitofwork import UnitOfWork
from unitofwork.core.config import Settings
from unitofwork.db import SQLAlchemySession, create_engine, create_session_factory, init_db

from . import models  # noqa: F401 - registers the test tables on SQLModel.metadata
from .helpers import sqlite_url


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=sqlite_url(tmp_path / "unitofwork.db"),
        db_lock_timeout_seconds=0.2,
        teardown_error_policy="log",
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture()
def make_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> Callable[[], UnitOfWork[SQLAlchemySession]]:
    def _factory() -> UnitOfWork[SQLAlchemySession]:
        return UnitOfWork(SQLAlchemySession(session_factory()), settings=settings)

    return _factory
