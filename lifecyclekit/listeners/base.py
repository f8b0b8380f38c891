"""Base listener class for lifecyclekit.

Listeners observe the lifecycle of a test class. Each of the five hooks
receives an ExecutionContextView describing the current test class,
instance, method and (for method teardown) the exception raised by the test.

Example:
    >>> from lifecyclekit import LifecycleListener
    >>>
    >>> class TimingListener(LifecycleListener):
    ...     def before_test_method(self, context):
    ...         context.set_attribute("started", time.perf_counter())
    ...
    ...     def after_test_method(self, context):
    ...         elapsed = time.perf_counter() - context.get_attribute("started")
    ...         print(f"{context.test_method.__name__}: {elapsed:.3f}s")

Registration is duck-typed: any object providing the five hook methods can
be registered, subclassing is only a convenience.
"""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Any

from lifecyclekit.listeners.types import Phase

if TYPE_CHECKING:
    from lifecyclekit.context import ExecutionContextView


class LifecycleListener(ABC):
    """Abstract base class for lifecycle listeners.

    Every hook defaults to a no-op, so subclasses only override the phases
    they care about. Hooks may raise; whether the error stops the phase
    depends on the phase (see LifecycleDispatcher).

    Class Attributes:
        name: Display name used in logs and results (defaults to class name)
    """

    name: str = ""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={listener_name(self)!r}>"

    def before_test_class(self, context: ExecutionContextView) -> None:
        """Called once before any test of the class runs.

        Instance, method and exception are all ``None`` at this point.
        """

    def prepare_test_instance(self, context: ExecutionContextView) -> None:
        """Called right after the test instance is created.

        Typically used to inject dependencies into ``context.test_instance``.
        """

    def before_test_method(self, context: ExecutionContextView) -> None:
        """Called before each test method, with instance and method set."""

    def after_test_method(self, context: ExecutionContextView) -> None:
        """Called after each test method.

        ``context.test_exception`` holds the error raised by the test body,
        or ``None`` if it passed.
        """

    def after_test_class(self, context: ExecutionContextView) -> None:
        """Called once after all tests of the class have run."""


def is_listener(obj: Any) -> bool:
    """Whether ``obj`` exposes at least one callable lifecycle hook."""
    return any(callable(getattr(obj, phase.hook_name, None)) for phase in Phase)


def listener_name(listener: Any) -> str:
    """Get a display name for any listener object."""
    name = getattr(listener, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(listener).__name__
