"""Phase and outcome types for lifecycle dispatch.

This module defines the five lifecycle phases, the traversal rules attached
to each of them, and the result objects produced by a dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Traversal(str, Enum):
    """Direction in which the listener registry is walked."""

    FORWARD = "forward"
    REVERSE = "reverse"


class Phase(str, Enum):
    """The five lifecycle notification points.

    Setup phases walk the registry forward and stop at the first failure.
    Teardown phases walk it in reverse and notify every listener.
    """

    BEFORE_TEST_CLASS = "before_test_class"
    PREPARE_TEST_INSTANCE = "prepare_test_instance"
    BEFORE_TEST_METHOD = "before_test_method"
    AFTER_TEST_METHOD = "after_test_method"
    AFTER_TEST_CLASS = "after_test_class"

    @property
    def hook_name(self) -> str:
        """Name of the listener method invoked for this phase."""
        return self.value

    @property
    def traversal(self) -> Traversal:
        if self in _TEARDOWN_PHASES:
            return Traversal.REVERSE
        return Traversal.FORWARD

    @property
    def fail_fast(self) -> bool:
        """Whether the first listener failure aborts the traversal."""
        return self not in _TEARDOWN_PHASES

    @property
    def requires_instance(self) -> bool:
        return self not in (Phase.BEFORE_TEST_CLASS, Phase.AFTER_TEST_CLASS)


_TEARDOWN_PHASES = frozenset({Phase.AFTER_TEST_METHOD, Phase.AFTER_TEST_CLASS})


class ErrorKind(str, Enum):
    """Tag distinguishing why a phase did not complete cleanly."""

    ARGUMENT = "argument"
    LISTENER = "listener"


@dataclass
class ListenerOutcome:
    """Result of invoking one listener hook.

    Attributes:
        listener_name: Display name of the listener
        phase: The phase that was dispatched
        position: Zero-based index of the listener in traversal order
        success: Whether the hook returned normally
        error: The exception raised by the hook, if any
        duration_ms: Execution time in milliseconds
    """

    listener_name: str
    phase: Phase
    position: int
    success: bool = True
    error: Exception | None = None
    duration_ms: float = 0.0


@dataclass
class PhaseResult:
    """Outcome of dispatching a single phase.

    ``error`` is the error that the raising API propagates to the caller.
    For teardown phases, failures after the first one land in ``suppressed``.

    Attributes:
        phase: The phase that was dispatched
        outcomes: One entry per listener invoked, in invocation order
        error: The propagated error, if any
        error_kind: ARGUMENT or LISTENER when ``error`` is set
        suppressed: Teardown failures that were logged but not propagated
    """

    phase: Phase
    outcomes: list[ListenerOutcome] = field(default_factory=list)
    error: Exception | None = None
    error_kind: ErrorKind | None = None
    suppressed: list[Exception] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def invoked(self) -> list[str]:
        """Names of the listeners invoked, in invocation order."""
        return [outcome.listener_name for outcome in self.outcomes]

    def raise_for_error(self) -> None:
        """Re-raise the propagated error unchanged, if there is one."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for reporting."""
        return {
            "phase": self.phase.value,
            "success": self.success,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error": f"{type(self.error).__name__}: {self.error}" if self.error else None,
            "suppressed": [f"{type(e).__name__}: {e}" for e in self.suppressed],
            "outcomes": [
                {
                    "listener": o.listener_name,
                    "position": o.position,
                    "success": o.success,
                    "duration_ms": o.duration_ms,
                }
                for o in self.outcomes
            ],
        }
