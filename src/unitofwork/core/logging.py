"""Logging setup for applications embedding the unit-of-work package.

Only the ``unitofwork`` and ``sqlalchemy.engine`` loggers are configured; the
root logger stays under the host application's control.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import Settings, get_settings
from .context import current_unit_of_work_id

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [uow=%(unit_of_work_id)s] %(message)s"


class UnitOfWorkContextFilter(logging.Filter):
    """Copy the current unit-of-work id onto each record as ``unit_of_work_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.unit_of_work_id = current_unit_of_work_id()
        return True


def _logger_config(level: int, *, handlers: list[str]) -> dict[str, Any]:
    return {"handlers": handlers, "level": level, "propagate": False}


def configure_logging(settings: Settings | None = None) -> None:
    """Route coordinator and SQL engine logs through one stamped stream handler.

    ``db_echo`` raises ``sqlalchemy.engine`` to INFO so emitted SQL shows up
    alongside the coordinator's begin/commit/rollback records.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    sql_level = logging.INFO if settings.db_echo else logging.WARNING

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "unit_of_work": {"format": _LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "filters": {
                "unit_of_work_id": {"()": UnitOfWorkContextFilter},
            },
            "handlers": {
                "unit_of_work_stream": {
                    "class": "logging.StreamHandler",
                    "formatter": "unit_of_work",
                    "filters": ["unit_of_work_id"],
                },
            },
            "loggers": {
                "unitofwork": _logger_config(level, handlers=["unit_of_work_stream"]),
                "sqlalchemy.engine": _logger_config(sql_level, handlers=["unit_of_work_stream"]),
            },
        }
    )


__all__ = ["UnitOfWorkContextFilter", "configure_logging"]
