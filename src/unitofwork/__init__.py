"""Unit-of-work transaction coordinator for async relational sessions."""

from __future__ import annotations

__version__ = "0.1.0"

from .abstractions import UnitOfWorkProtocol
from .cancellation import CancellationToken
from .errors import (
    OperationCancelledError,
    TeardownError,
    UnitOfWorkDisposedError,
    UnitOfWorkError,
)
from .uow import UnitOfWork

__all__ = [
    "CancellationToken",
    "OperationCancelledError",
    "TeardownError",
    "UnitOfWork",
    "UnitOfWorkDisposedError",
    "UnitOfWorkError",
    "UnitOfWorkProtocol",
    "__version__",
]
