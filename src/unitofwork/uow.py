"""Transaction-lifecycle coordinator wrapping a single data-access session."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Generic, TypeVar
from uuid import uuid4

from .core.config import Settings, get_settings
from .core.context import unit_of_work_log_context
from .errors import TeardownError, UnitOfWorkDisposedError, UnitOfWorkError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .abstractions import Operation
    from .cancellation import CancellationToken
    from .db.base import TransactionalSessionProtocol, TransactionProtocol

logger = logging.getLogger(__name__)

SessionType = TypeVar("SessionType", bound="TransactionalSessionProtocol")


class UnitOfWork(Generic[SessionType]):
    """Scope a sequence of data operations to one all-or-nothing transaction.

    The unit of work holds at most one active transaction. Nested calls detect
    the active transaction and ride along instead of opening a second one, so
    only the outermost boundary commits or rolls back. Instances are not safe
    for concurrent use; give every task its own session and unit of work.
    """

    def __init__(self, session: SessionType, *, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._active: TransactionProtocol | None = None
        self._disposed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self.id = uuid4().hex[:12]

    @property
    def session(self) -> SessionType:
        """Return the wrapped session."""
        return self._session

    @property
    def has_active_transaction(self) -> bool:
        return self._active is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def begin_transaction(self, cancellation: CancellationToken | None = None) -> bool:
        """Open a transaction, returning ``True`` only if this call opened it.

        Returns ``False`` without side effects when a transaction is already
        active (the caller does not own it) or when the session's backend has no
        transaction concept.
        """
        self._ensure_usable()
        if self._active is not None:
            logger.debug("Reusing active transaction of unit of work %s", self.id)
            return False
        if not self._session.is_relational():
            logger.debug("Session of unit of work %s is not relational; no transaction opened", self.id)
            return False

        self._active = await self._session.begin_transaction(cancellation)
        logger.debug("Opened transaction for unit of work %s", self.id)
        return True

    async def commit(self, cancellation: CancellationToken | None = None) -> None:
        """Commit and release the active transaction; a no-op when none is active.

        A failing commit leaves the transaction in place so the caller can still
        roll back or dispose.
        """
        self._ensure_usable()
        if self._active is None:
            return

        await self._active.commit(cancellation)
        await self._active.dispose()
        self._active = None
        logger.debug("Committed transaction for unit of work %s", self.id)

    async def rollback(self) -> None:
        """Roll back and release the active transaction; a no-op when none is active."""
        if self._active is None:
            return

        await self._active.rollback()
        await self._active.dispose()
        self._active = None
        logger.debug("Rolled back transaction for unit of work %s", self.id)

    async def save_changes(self, cancellation: CancellationToken | None = None) -> int:
        """Persist pending changes through the session and return the affected count."""
        self._ensure_usable()
        return await self._session.save_changes(cancellation)

    async def execute_in_transaction(
        self,
        operation: Operation,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Run ``operation`` inside a transaction owned by the outermost call.

        ``operation`` receives ``cancellation`` and decides when to call
        :meth:`save_changes`. When this call opened the transaction it commits on
        success and rolls back on any error, including cancellation. When an
        outer transaction is already active the state is left untouched and
        errors simply propagate so the outer boundary decides.
        """
        self._ensure_usable()
        with unit_of_work_log_context(self.id):
            started_here = await self.begin_transaction(cancellation)
            try:
                await operation(cancellation)
                if started_here:
                    await self.commit(cancellation)
            except BaseException:
                # CancelledError derives from BaseException.
                if started_here:
                    logger.warning("Operation failed; rolling back unit of work %s", self.id)
                    await self.rollback()
                raise

    async def dispose_async(self) -> None:
        """Tear down the unit of work. Safe to call more than once.

        An open transaction is abandoned (released without commit), then the
        session is disposed. Every step runs even if an earlier one fails; the
        configured ``teardown_error_policy`` decides whether failures are logged
        or raised as ``TeardownError`` once teardown is complete. Cancellation
        while the transaction is released still disposes the session before the
        ``CancelledError`` propagates.
        """
        if self._disposed:
            return
        self._disposed = True
        failures: list[Exception] = []

        transaction, self._active = self._active, None
        try:
            if transaction is not None:
                logger.debug("Abandoning open transaction of unit of work %s", self.id)
                try:
                    await transaction.dispose()
                except Exception as exc:
                    failures.append(exc)
                    self._report_teardown_failure("transaction", exc)
        finally:
            try:
                await self._session.dispose()
            except Exception as exc:
                failures.append(exc)
                self._report_teardown_failure("session", exc)

        logger.debug("Disposed unit of work %s", self.id)
        if failures and self._settings.teardown_error_policy == "raise":
            raise TeardownError(
                details={"unit_of_work_id": self.id, "failures": [repr(exc) for exc in failures]}
            ) from failures[0]

    def close(self) -> None:
        """Dispose synchronously, blocking the calling thread until teardown ends.

        Intended for call sites that cannot await. It blocks, so keep it off
        latency-sensitive paths and prefer ``await dispose_async()``. Calling it
        from a thread that is running an event loop raises ``UnitOfWorkError``.
        """
        if self._disposed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise UnitOfWorkError(
                "close() would block the running event loop; await dispose_async() instead.",
                code="blocking_dispose",
            )

        loop = self._loop
        if loop is not None and loop.is_running():
            asyncio.run_coroutine_threadsafe(self.dispose_async(), loop).result()
        else:
            asyncio.run(self.dispose_async())

    async def __aenter__(self) -> UnitOfWork[SessionType]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.dispose_async()

    def __enter__(self) -> UnitOfWork[SessionType]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._disposed:
            status = "disposed"
        elif self._active is not None:
            status = "active"
        else:
            status = "idle"
        return f"<UnitOfWork id={self.id} status={status}>"

    def _ensure_usable(self) -> None:
        if self._disposed:
            raise UnitOfWorkDisposedError(details={"unit_of_work_id": self.id})
        self._loop = asyncio.get_running_loop()

    def _report_teardown_failure(self, resource: str, exc: Exception) -> None:
        if self._settings.teardown_error_policy == "log":
            logger.warning(
                "Failed to dispose %s of unit of work %s during teardown",
                resource,
                self.id,
                exc_info=exc,
            )


__all__ = ["SessionType", "UnitOfWork"]
