"""Caller-facing unit-of-work contract."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .cancellation import CancellationToken

Operation = Callable[["CancellationToken | None"], Awaitable[None]]


@runtime_checkable
class UnitOfWorkProtocol(Protocol):
    """Operations application code uses to scope work to one transaction."""

    async def begin_transaction(self, cancellation: CancellationToken | None = None) -> bool:  # pragma: no cover - interface definition
        """Open a transaction unless one is active or the backend has none."""

    async def commit(self, cancellation: CancellationToken | None = None) -> None:  # pragma: no cover - interface definition
        """Commit the active transaction, if any."""

    async def rollback(self) -> None:  # pragma: no cover - interface definition
        """Roll back the active transaction, if any."""

    async def save_changes(self, cancellation: CancellationToken | None = None) -> int:  # pragma: no cover - interface definition
        """Persist pending changes through the session."""

    async def execute_in_transaction(
        self,
        operation: Operation,
        cancellation: CancellationToken | None = None,
    ) -> None:  # pragma: no cover - interface definition
        """Run ``operation`` inside the outermost transaction boundary."""


__all__ = ["Operation", "UnitOfWorkProtocol"]
