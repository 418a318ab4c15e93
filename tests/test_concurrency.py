from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from unitofwork import CancellationToken, UnitOfWork
from unitofwork.core.config import Settings
from unitofwork.db import SQLAlchemySession, create_engine, create_session_factory, init_db

from .helpers import count_widgets, sqlite_url, widget_names
from .models import Widget

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def patient_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    settings = Settings(
        database_url=sqlite_url(tmp_path / "concurrency.db"),
        db_lock_timeout_seconds=30.0,
    )
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


async def test_lock_contention_rolls_back_loser_and_keeps_winner(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> None:
    async with session_factory() as setup:
        setup.add(Widget(name="seed"))
        await setup.commit()

    first = UnitOfWork(SQLAlchemySession(session_factory()), settings=settings)
    second = UnitOfWork(SQLAlchemySession(session_factory()), settings=settings)
    async with first, second:
        await first.begin_transaction()
        first_session = first.session.session
        held = (await first_session.execute(select(Widget))).scalars().one()
        held.name = "first"
        await first.save_changes()

        async def overwrite(_: CancellationToken | None) -> None:
            second_session = second.session.session
            contender = (await second_session.execute(select(Widget))).scalars().one()
            contender.name = "second"
            await second.save_changes()

        with pytest.raises(OperationalError, match="locked"):
            await second.execute_in_transaction(overwrite)

        assert second.has_active_transaction is False

        await first.commit()
        assert first.has_active_transaction is False

    assert await widget_names(session_factory) == ["first"]


async def test_independent_units_of_work_share_one_store(patient_engine: AsyncEngine) -> None:
    session_factory = create_session_factory(patient_engine)
    units: list[UnitOfWork[SQLAlchemySession]] = []

    async def insert(index: int) -> None:
        async with UnitOfWork(SQLAlchemySession(session_factory())) as unit_of_work:
            units.append(unit_of_work)

            async def operation(_: CancellationToken | None) -> None:
                unit_of_work.session.add(Widget(name=f"item-{index}"))
                await unit_of_work.save_changes()

            await unit_of_work.execute_in_transaction(operation)

    results = await asyncio.gather(*(insert(index) for index in range(10)), return_exceptions=True)

    succeeded = [result for result in results if result is None]
    failed = [result for result in results if result is not None]
    assert all(isinstance(error, OperationalError) for error in failed)
    assert all(not unit_of_work.has_active_transaction for unit_of_work in units)
    assert all(unit_of_work.disposed for unit_of_work in units)
    assert await count_widgets(session_factory) == len(succeeded)
