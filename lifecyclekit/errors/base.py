"""Exception hierarchy for lifecyclekit.

Every lifecyclekit error carries:
- error_code: an ErrorCode enum for programmatic handling
- context: ErrorContext describing where in the lifecycle it happened
- suggestions: actionable steps for resolving the problem

Listener failures are deliberately *not* forced into this hierarchy: a
listener may raise any exception and the dispatcher propagates it unchanged.
ListenerError exists as a convenient base for listeners that want coded errors.

Example:
    try:
        dispatcher.prepare_test_instance(None)
    except ArgumentError as e:
        print(f"Error [{e.error_code.value}]: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    - E1xx: Argument errors
    - E2xx: Configuration errors
    - E3xx: Listener errors
    - E9xx: Unknown/internal errors
    """

    # Argument errors (E1xx)
    INVALID_ARGUMENT = "E101"
    NULL_TEST_INSTANCE = "E102"
    NULL_LISTENER = "E103"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"
    LISTENER_LOAD_FAILED = "E202"
    NO_CONTEXT_LOADER = "E203"

    # Listener errors (E3xx)
    LISTENER_FAILED = "E301"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "argument"
        elif code_num < 300:
            return "configuration"
        elif code_num < 400:
            return "listener"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Where in the test lifecycle an error occurred.

    Attributes:
        test_class: Qualified name of the test class
        phase: Lifecycle phase being dispatched
        listener: Name of the listener involved
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    test_class: str | None = None
    phase: str | None = None
    listener: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "test_class": self.test_class,
            "phase": self.phase,
            "listener": self.listener,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.test_class:
            parts.append(f"class={self.test_class}")
        if self.phase:
            parts.append(f"phase={self.phase}")
        if self.listener:
            parts.append(f"listener={self.listener}")
        return " > ".join(parts) if parts else "unknown location"


class LifecycleError(Exception):
    """Base exception for all lifecyclekit errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with lifecycle details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [f"Error [{self.error_code.value}]: {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ArgumentError(LifecycleError, ValueError):
    """A required argument was missing or invalid.

    Raised synchronously, before any context mutation or listener
    notification takes place.
    """

    error_code = ErrorCode.INVALID_ARGUMENT
    default_message = "Invalid argument"
    default_suggestions = [
        "Pass the test instance that is currently executing",
        "Make sure the runner drives phases in order: before class, "
        "prepare instance, before method, after method, after class",
    ]


class ListenerError(LifecycleError):
    """Failure raised from inside a listener hook.

    Listeners are free to raise any exception; this class only gives them a
    coded base to raise from.
    """

    error_code = ErrorCode.LISTENER_FAILED
    default_message = "Listener failed"


class ConfigurationError(LifecycleError):
    """Invalid configuration or missing collaborator."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid lifecyclekit configuration"
    default_suggestions = [
        "Check lifecyclekit.yaml and LIFECYCLEKIT_* environment variables",
    ]


class ListenerLoadError(ConfigurationError):
    """A listener import path could not be loaded."""

    error_code = ErrorCode.LISTENER_LOAD_FAILED
    default_message = "Failed to load listener"
    default_suggestions = [
        "Use 'package.module:ClassName' or 'package.module.ClassName'",
        "Verify the module is importable from the current environment",
    ]

    def __init__(self, spec: str, reason: str, cause: Exception | None = None) -> None:
        self.spec = spec
        self.reason = reason
        message = f"Failed to load listener '{spec}': {reason}"
        if cause:
            message += f" (caused by: {cause})"
        super().__init__(message, cause=cause, listener_spec=spec)
