"""Structured logging helpers carrying source-file and phase context."""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import Iterator

_SOURCE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "source", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | phase=%(phase)s | source=%(source)s | "
    "%(name)s | %(message)s"
)


class _BindgenContextFilter(logging.Filter):
    """Inject the current phase and source file into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.source = _SOURCE_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        return True


def _ensure_filter_on_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if not any(isinstance(f, _BindgenContextFilter) for f in handler.filters):
            handler.addFilter(_BindgenContextFilter())


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging with phase/source context fields."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    _ensure_filter_on_root_handlers()


def get_phase() -> str:
    return _PHASE_VAR.get("-")


def get_source() -> str:
    return _SOURCE_VAR.get("-")


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``phase``."""
    token = _PHASE_VAR.set(phase)
    try:
        yield
    finally:
        _PHASE_VAR.reset(token)


@contextmanager
def source_scope(source: str) -> Iterator[None]:
    """Tag log records emitted inside the block with the input ``source``."""
    token = _SOURCE_VAR.set(source)
    try:
        yield
    finally:
        _SOURCE_VAR.reset(token)
