"""Logging setup for lifecyclekit.

lifecyclekit modules log through standard ``logging.getLogger(__name__)``
loggers under the ``lifecyclekit`` namespace. This module adds:
- JSON-formatted output for machine consumption
- Human-readable colored output for development
- Context fields (test class, phase) bound for the duration of a dispatch

Example:
    Basic setup::

        from lifecyclekit.observability.logging import configure_logging

        configure_logging(level="DEBUG")

    With context::

        with log_context(test_class="tests.test_orders.TestOrders"):
            logger.warning("listener failed")  # record carries test_class
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lifecyclekit.config import DispatcherSettings

ROOT_LOGGER_NAME = "lifecyclekit"

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar(
    "lifecyclekit_log_context", default=None
)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the fields currently bound by log_context."""
    current = _context_fields.get()
    return dict(current) if current else {}


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields to every record emitted inside the block.

    Nested blocks extend the outer fields; the previous fields are restored
    on exit.

    Args:
        **kwargs: Fields to add to logging context.
    """
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


class LogContextFilter(logging.Filter):
    """Copies the bound context fields onto each record as ``context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = get_log_context()  # type: ignore[attr-defined]
        return True


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    # Records that skipped LogContextFilter fall back to the live context.
    context = getattr(record, "context", None)
    if context is None:
        context = get_log_context()
    return dict(context)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC, ISO 8601, taken from the record), ``level``,
    ``logger``, ``message``, then ``context`` and ``exception`` when present.
    ``extra_fields`` are merged in last and never replace those keys.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_location = include_location
        self.extra_fields = dict(extra_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _record_context(record)
        if context:
            payload["context"] = context

        if self.include_location:
            payload["location"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value) if exc_value is not None else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            payload.setdefault(key, value)

        return json.dumps(payload, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Single-line console output, optionally colored by level.

    Example line::

        12:04:31.207 WARNING  [lifecyclekit.manager] Caught exception ... (phase=after_test_class)
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[34m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream: Any | None = None) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors and _is_tty(stream or sys.stderr)

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        clock = f"{self.formatTime(record, self.datefmt)}.{int(record.msecs):03d}"
        line = f"{clock} {level} [{record.name}] {record.getMessage()}"

        context = _record_context(record)
        if context:
            fields = " ".join(f"{key}={value}" for key, value in context.items())
            line = f"{line} ({fields})"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _is_tty(stream: Any) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    level: int | str = logging.WARNING,
    json_format: bool = False,
    include_location: bool = False,
    stream: Any | None = None,
    extra_fields: dict[str, Any] | None = None,
) -> logging.Logger:
    """Configure the ``lifecyclekit`` root logger.

    Replaces any handlers previously installed on it.

    Args:
        level: Minimum log level.
        json_format: Use JSON format for output.
        include_location: Include file/line/function in JSON output.
        stream: Output stream (defaults to sys.stderr).
        extra_fields: Fields added to every JSON record, e.g. a run id.

    Returns:
        The configured root logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.addFilter(LogContextFilter())
    if json_format:
        handler.setFormatter(
            StructuredFormatter(include_location=include_location, extra_fields=extra_fields)
        )
    else:
        handler.setFormatter(HumanReadableFormatter(stream=stream))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


def configure_logging_from_settings(
    settings: DispatcherSettings,
    stream: Any | None = None,
    extra_fields: dict[str, Any] | None = None,
) -> logging.Logger:
    """Configure logging from ``log_level`` and ``json_logs`` of the settings."""
    return configure_logging(
        level=settings.log_level_num,
        json_format=settings.json_logs,
        stream=stream,
        extra_fields=extra_fields,
    )
