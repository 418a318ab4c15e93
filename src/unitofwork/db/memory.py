"""In-memory session for backends without a transaction concept."""

from __future__ import annotations

from typing import Any, NoReturn

from ..cancellation import CancellationToken, raise_if_cancelled
from ..errors import UnitOfWorkError


class InMemorySession:
    """Non-relational session that stages objects and applies them on save.

    Useful for development and tests. Data lives on the instance and is lost
    when it is disposed.
    """

    def __init__(self) -> None:
        self._items: list[Any] = []
        self._pending_add: list[Any] = []
        self._pending_delete: list[Any] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def is_relational(self) -> bool:
        return False

    def add(self, instance: Any) -> None:
        self._pending_add.append(instance)

    def delete(self, instance: Any) -> None:
        self._pending_delete.append(instance)

    def all(self) -> list[Any]:
        """Return every saved object."""
        return list(self._items)

    async def begin_transaction(self, cancellation: CancellationToken | None = None) -> NoReturn:
        """Reject transactions; this backend applies every save immediately.

        ``UnitOfWork`` checks :meth:`is_relational` first and never calls this
        for an in-memory session, so reaching it means a caller bypassed the
        coordinator.
        """
        raise UnitOfWorkError(
            "In-memory sessions do not support transactions.",
            code="transactions_unsupported",
        )

    async def save_changes(self, cancellation: CancellationToken | None = None) -> int:
        raise_if_cancelled(cancellation)
        affected = 0
        for instance in self._pending_add:
            self._items.append(instance)
            affected += 1
        for instance in self._pending_delete:
            if instance in self._items:
                self._items.remove(instance)
                affected += 1
        self._pending_add.clear()
        self._pending_delete.clear()
        return affected

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._pending_add.clear()
        self._pending_delete.clear()


__all__ = ["InMemorySession"]
