"""Exception types raised by the unit-of-work coordinator."""

from __future__ import annotations

import asyncio
from typing import Any


class UnitOfWorkError(Exception):
    """Base class for coordinator errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "unit_of_work_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class UnitOfWorkDisposedError(UnitOfWorkError):
    """Raised when a disposed unit of work is asked to do transactional work."""

    def __init__(
        self,
        message: str = "Unit of work has already been disposed.",
        *,
        code: str = "unit_of_work_disposed",
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class TeardownError(UnitOfWorkError):
    """Raised after teardown completes when a step failed under the ``raise`` policy."""

    def __init__(
        self,
        message: str = "Unit of work teardown failed.",
        *,
        code: str = "teardown_failed",
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class OperationCancelledError(asyncio.CancelledError):
    """Raised when a ``CancellationToken`` has been triggered."""

    def __init__(self, message: str = "Operation was cancelled.") -> None:
        super().__init__(message)
        self.message = message


__all__ = [
    "OperationCancelledError",
    "TeardownError",
    "UnitOfWorkDisposedError",
    "UnitOfWorkError",
]
