"""Correlate log records with the unit of work whose operation emitted them."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

UNBOUND_UNIT_OF_WORK_ID = "-"

_current_unit_of_work_id: ContextVar[str | None] = ContextVar("current_unit_of_work_id", default=None)


def current_unit_of_work_id() -> str:
    """Return the id of the unit of work running in this context, or ``"-"``."""
    return _current_unit_of_work_id.get() or UNBOUND_UNIT_OF_WORK_ID


@contextmanager
def unit_of_work_log_context(unit_of_work_id: str) -> Iterator[None]:
    """Stamp log records emitted inside the block with ``unit_of_work_id``.

    Blocks nest: leaving an inner block restores whichever id the enclosing
    block bound, so an operation that drives a second unit of work logs under
    the right id on both sides of the call.
    """
    token = _current_unit_of_work_id.set(unit_of_work_id)
    try:
        yield
    finally:
        _current_unit_of_work_id.reset(token)


__all__ = ["UNBOUND_UNIT_OF_WORK_ID", "current_unit_of_work_id", "unit_of_work_log_context"]
