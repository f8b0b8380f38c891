"""Observability helpers for lifecyclekit."""

from lifecyclekit.observability.logging import (
    HumanReadableFormatter,
    LogContextFilter,
    StructuredFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_log_context,
    log_context,
)

__all__ = [
    "HumanReadableFormatter",
    "LogContextFilter",
    "StructuredFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "get_log_context",
    "log_context",
]
