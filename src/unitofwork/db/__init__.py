"""Session collaborators consumed by the unit of work."""

from __future__ import annotations

from .base import TransactionalSessionProtocol, TransactionProtocol
from .memory import InMemorySession
from .session import (
    SQLAlchemySession,
    SQLAlchemyTransaction,
    create_engine,
    create_session_factory,
    init_db,
    unit_of_work_scope,
)

__all__ = [
    "InMemorySession",
    "SQLAlchemySession",
    "SQLAlchemyTransaction",
    "TransactionProtocol",
    "TransactionalSessionProtocol",
    "create_engine",
    "create_session_factory",
    "init_db",
    "unit_of_work_scope",
]
