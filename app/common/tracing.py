# app/common/tracing.py
from __future__ import annotations
import logging
from contextvars import ContextVar
from typing import Optional, Callable

_WORKFLOW_ID: ContextVar[Optional[str]] = ContextVar("_WORKFLOW_ID", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [workflow=%(workflow_id)s]: %(message)s"


def get_workflow_id() -> Optional[str]:
    return _WORKFLOW_ID.get()


def set_workflow_id(value: Optional[str]) -> None:
    _WORKFLOW_ID.set(value)


def _install_logrecord_factory() -> None:
    """Ensure every LogRecord has .workflow_id (even for 3rd-party loggers)."""
    old_factory: Callable[..., logging.LogRecord] = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        if not hasattr(record, "workflow_id"):
            record.workflow_id = get_workflow_id() or "-"
        return record

    logging.setLogRecordFactory(record_factory)


def setup_logging(level: int | str = logging.INFO) -> None:
    """Set a format that includes workflow_id and install the factory."""
    _install_logrecord_factory()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
