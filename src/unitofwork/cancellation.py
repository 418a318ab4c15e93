"""Cooperative cancellation signal passed through unit-of-work operations."""

from __future__ import annotations

import asyncio

from .errors import OperationCancelledError


class CancellationToken:
    """A one-shot flag that collaborators check before doing I/O.

    Triggering the token never interrupts work already in flight; callers and
    sessions poll it through :meth:`raise_if_cancelled` at their own boundaries.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Trigger the token. Idempotent."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()

    async def wait(self) -> None:
        """Block until the token is triggered."""
        await self._event.wait()

    @classmethod
    def cancelled_token(cls) -> CancellationToken:
        """Return a token that has already fired."""
        token = cls()
        token.cancel()
        return token


def raise_if_cancelled(cancellation: CancellationToken | None) -> None:
    """Raise ``OperationCancelledError`` when ``cancellation`` has fired."""
    if cancellation is not None:
        cancellation.raise_if_cancelled()


__all__ = ["CancellationToken", "raise_if_cancelled"]
