from __future__ import annotations

import asyncio

import pytest

from unitofwork import CancellationToken, OperationCancelledError
from unitofwork.cancellation import raise_if_cancelled
from unitofwork.db import InMemorySession


def test_token_starts_untriggered_and_cancels_idempotently() -> None:
    token = CancellationToken()
    assert token.cancelled is False
    token.raise_if_cancelled()

    token.cancel()
    token.cancel()

    assert token.cancelled is True
    with pytest.raises(OperationCancelledError):
        token.raise_if_cancelled()


def test_operation_cancelled_error_is_an_asyncio_cancellation() -> None:
    with pytest.raises(asyncio.CancelledError):
        raise_if_cancelled(CancellationToken.cancelled_token())

    raise_if_cancelled(None)


@pytest.mark.asyncio
async def test_wait_returns_once_token_fires() -> None:
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert waiter.done() is False

    token.cancel()

    await asyncio.wait_for(waiter, timeout=1)


@pytest.mark.asyncio
async def test_in_memory_session_save_honours_cancellation() -> None:
    session = InMemorySession()
    session.add("row")

    with pytest.raises(OperationCancelledError):
        await session.save_changes(CancellationToken.cancelled_token())

    assert session.all() == []
    assert await session.save_changes() == 1
    assert session.all() == ["row"]

    session.delete("row")
    assert await session.save_changes() == 1
    assert session.all() == []

