"""Capability contracts the unit of work requires from a data-access session."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..cancellation import CancellationToken

__all__ = ["TransactionProtocol", "TransactionalSessionProtocol"]


@runtime_checkable
class TransactionProtocol(Protocol):
    """An open, uncommitted unit of atomicity against a relational store."""

    async def commit(self, cancellation: CancellationToken | None = None) -> None:  # pragma: no cover - interface definition
        """Make the transaction's work durable."""

    async def rollback(self) -> None:  # pragma: no cover - interface definition
        """Discard the transaction's work."""

    async def dispose(self) -> None:  # pragma: no cover - interface definition
        """Release the handle's resources without committing."""


@runtime_checkable
class TransactionalSessionProtocol(Protocol):
    """Protocol describing the minimal session surface the coordinator relies on."""

    def is_relational(self) -> bool:  # pragma: no cover - interface definition
        """Return ``True`` if the backend supports transactions at all."""

    async def begin_transaction(
        self, cancellation: CancellationToken | None = None
    ) -> TransactionProtocol:  # pragma: no cover - interface definition
        """Open and return a new transaction handle."""

    async def save_changes(
        self, cancellation: CancellationToken | None = None
    ) -> int:  # pragma: no cover - interface definition
        """Flush pending mutations, returning the number of affected records."""

    async def dispose(self) -> None:  # pragma: no cover - interface definition
        """Release the session's resources."""
