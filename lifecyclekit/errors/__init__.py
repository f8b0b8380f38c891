"""Error hierarchy for lifecyclekit."""

from lifecyclekit.errors.base import (
    ArgumentError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    LifecycleError,
    ListenerError,
    ListenerLoadError,
)

__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "ErrorCode",
    "ErrorContext",
    "LifecycleError",
    "ListenerError",
    "ListenerLoadError",
]
