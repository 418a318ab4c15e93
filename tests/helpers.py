"""Query helpers for verifying what reached the store."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import func
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from .models import Widget


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def count_widgets(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Widget))
        return int(result.scalar_one())


async def widget_names(session_factory: async_sessionmaker[AsyncSession]) -> list[str]:
    async with session_factory() as session:
        result = await session.execute(select(Widget).order_by(Widget.id))
        return [widget.name for widget in result.scalars().all()]
