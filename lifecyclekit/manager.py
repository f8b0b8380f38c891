"""Lifecycle dispatcher for test classes.

The LifecycleDispatcher is the entry point a test runner talks to. It holds
the ordered listeners for one test class and the ExecutionContext they share,
and notifies the listeners at five points of the class lifecycle:

    before_test_class
      (prepare_test_instance -> before_test_method -> after_test_method)*
    after_test_class

Before each phase the dispatcher swaps the context state (instance, method,
exception) in one step, then walks the listeners:

- setup phases walk forward in registration order and stop at the first
  failing listener, re-raising its exception unchanged;
- teardown phases walk in reverse, so the last-registered listener tears
  down first. Every listener runs; the first failure is re-raised once all of
  them have returned and later ones are only logged.

Example:
    >>> dispatcher = LifecycleDispatcher(
    ...     OrderTests, resolver=StaticListenerResolver([TimingListener()])
    ... )
    >>> dispatcher.before_test_class()
    >>> instance = OrderTests()
    >>> dispatcher.prepare_test_instance(instance)
    >>> dispatcher.before_test_method(instance, OrderTests.test_create)
    >>> dispatcher.after_test_method(instance, OrderTests.test_create, None)
    >>> dispatcher.after_test_class()

The dispatcher does not validate the order in which phases are called and is
not thread-safe; one dispatcher serves one test class on one thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from lifecyclekit.bootstrap import (
    ConfiguredListenerResolver,
    ContextFactory,
    DefaultContextFactory,
    ListenerResolver,
)
from lifecyclekit.config import DispatcherSettings
from lifecyclekit.context import ExecutionContext
from lifecyclekit.errors import ArgumentError, ErrorCode, ErrorContext
from lifecyclekit.listeners.base import is_listener, listener_name
from lifecyclekit.listeners.registry import ListenerRegistry
from lifecyclekit.listeners.types import (
    ErrorKind,
    ListenerOutcome,
    Phase,
    PhaseResult,
    Traversal,
)
from lifecyclekit.observability.logging import log_context

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    Phase.BEFORE_TEST_CLASS: "process 'before class' callback for test class [{test_class}]",
    Phase.PREPARE_TEST_INSTANCE: "prepare test instance [{instance!r}]",
    Phase.BEFORE_TEST_METHOD: (
        "process 'before' execution of test method [{method}] "
        "for test instance [{instance!r}]"
    ),
    Phase.AFTER_TEST_METHOD: (
        "process 'after' execution for test: method [{method}], "
        "instance [{instance!r}], exception [{exception!r}]"
    ),
    Phase.AFTER_TEST_CLASS: "process 'after class' callback for test class [{test_class}]",
}


def _is_listener_batch(obj: Any) -> bool:
    return (
        isinstance(obj, Iterable)
        and not isinstance(obj, (str, bytes))
        and not is_listener(obj)
    )


class LifecycleDispatcher:
    """Notifies lifecycle listeners around the execution of one test class.

    Each phase has two forms: a raising method (``before_test_class`` and
    friends) that re-raises the propagated error, and ``dispatch`` which
    returns a PhaseResult instead.

    Attributes:
        test_class: The test class this dispatcher is bound to
    """

    def __init__(
        self,
        test_class: type,
        resolver: ListenerResolver | None = None,
        context_factory: ContextFactory | None = None,
        settings: DispatcherSettings | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            test_class: The test class whose lifecycle is dispatched
            resolver: Supplies the initial listeners; defaults to a
                ConfiguredListenerResolver over ``settings``
            context_factory: Builds the execution context; defaults to a
                DefaultContextFactory with its own cache
            settings: Used to build the default collaborators

        Raises:
            ArgumentError: If test_class is None
        """
        if test_class is None:
            raise ArgumentError("Test class must not be None")

        if resolver is None or context_factory is None:
            settings = settings or DispatcherSettings()
        if resolver is None:
            resolver = ConfiguredListenerResolver(settings)
        if context_factory is None:
            context_factory = DefaultContextFactory.from_settings(settings)

        self.test_class = test_class
        self._class_name = f"{test_class.__module__}.{test_class.__qualname__}"
        self._context = context_factory.create(test_class)
        self._registry = ListenerRegistry()
        # Keyed by id(); each entry holds the listener so the id stays unique.
        self._stats: dict[int, dict[str, Any]] = {}

        self.register_listeners(resolver.resolve(test_class))

    @property
    def execution_context(self) -> ExecutionContext:
        """The owned context, including ``update_state``."""
        return self._context

    @property
    def registry(self) -> ListenerRegistry:
        return self._registry

    def register_listeners(self, *listeners: Any) -> None:
        """Append listeners in the given order.

        Accepts listeners as separate arguments or as a single iterable of
        listeners (list, tuple, generator). An object exposing lifecycle
        hooks is always registered as one listener, even if iterable.
        Duplicates are kept. Must not be called while a phase is running.

        Raises:
            ArgumentError: If any listener is None (nothing is appended)
        """
        batch: Iterable[Any] = listeners
        if len(listeners) == 1 and _is_listener_batch(listeners[0]):
            batch = listeners[0]
        self._registry.extend(batch)

    def get_listeners(self) -> list[Any]:
        """Return the live, mutable list of registered listeners."""
        return self._registry.listeners

    # =========================================================================
    # Phases
    # =========================================================================

    def before_test_class(self) -> None:
        """Notify listeners before any test of the class runs."""
        self.dispatch(Phase.BEFORE_TEST_CLASS).raise_for_error()

    def prepare_test_instance(self, test_instance: Any) -> None:
        """Notify listeners that a test instance was created.

        Raises:
            ArgumentError: If test_instance is None
        """
        self.dispatch(Phase.PREPARE_TEST_INSTANCE, test_instance).raise_for_error()

    def before_test_method(self, test_instance: Any, test_method: Any) -> None:
        """Notify listeners before a test method runs.

        Raises:
            ArgumentError: If test_instance is None
        """
        self.dispatch(Phase.BEFORE_TEST_METHOD, test_instance, test_method).raise_for_error()

    def after_test_method(
        self,
        test_instance: Any,
        test_method: Any,
        exception: BaseException | None = None,
    ) -> None:
        """Notify listeners after a test method ran.

        ``exception`` is what the test body raised, or None if it passed. It
        is exposed to listeners through the context and never re-raised here.

        Raises:
            ArgumentError: If test_instance is None
        """
        self.dispatch(
            Phase.AFTER_TEST_METHOD, test_instance, test_method, exception
        ).raise_for_error()

    def after_test_class(self) -> None:
        """Notify listeners after all tests of the class ran."""
        self.dispatch(Phase.AFTER_TEST_CLASS).raise_for_error()

    def dispatch(
        self,
        phase: Phase,
        test_instance: Any = None,
        test_method: Any = None,
        exception: BaseException | None = None,
    ) -> PhaseResult:
        """Run one phase and report the outcome without raising.

        Arguments not used by ``phase`` are ignored, e.g. ``test_method``
        for PREPARE_TEST_INSTANCE.

        Args:
            phase: The phase to dispatch
            test_instance: Required for every phase except the class phases
            test_method: Used by the method phases
            exception: Used by AFTER_TEST_METHOD

        Returns:
            PhaseResult with per-listener outcomes and the error, if any
        """
        result = PhaseResult(phase=phase)

        if phase.requires_instance and test_instance is None:
            result.error = ArgumentError(
                "Test instance must not be None",
                error_code=ErrorCode.NULL_TEST_INSTANCE,
                context=ErrorContext(test_class=self._class_name, phase=phase.value),
            )
            result.error_kind = ErrorKind.ARGUMENT
            return result

        if phase in (Phase.BEFORE_TEST_CLASS, Phase.AFTER_TEST_CLASS):
            test_instance, test_method, exception = None, None, None
        elif phase is Phase.PREPARE_TEST_INSTANCE:
            test_method, exception = None, None
        elif phase is Phase.BEFORE_TEST_METHOD:
            exception = None

        logger.debug(
            f"{phase.value}(): class [{self._class_name}], instance [{test_instance!r}], "
            f"method [{test_method}], exception [{exception!r}]"
        )
        self._context.update_state(test_instance, test_method, exception)

        if phase.traversal is Traversal.FORWARD:
            listeners = self._registry.forward()
        else:
            listeners = self._registry.reverse()

        with log_context(test_class=self._class_name, phase=phase.value):
            for position, listener in enumerate(listeners):
                outcome = self._invoke(listener, phase, position)
                result.outcomes.append(outcome)
                if outcome.success:
                    continue

                self._log_failure(phase, outcome, test_instance, test_method, exception)
                if result.error is None:
                    result.error = outcome.error
                    result.error_kind = ErrorKind.LISTENER
                else:
                    result.suppressed.append(outcome.error)

                if phase.fail_fast:
                    break

        return result

    def _invoke(self, listener: Any, phase: Phase, position: int) -> ListenerOutcome:
        name = listener_name(listener)
        outcome = ListenerOutcome(listener_name=name, phase=phase, position=position)
        start_time = time.perf_counter()

        try:
            hook = getattr(listener, phase.hook_name)
            hook(self._context.view)
        except Exception as e:
            outcome.success = False
            outcome.error = e

        outcome.duration_ms = (time.perf_counter() - start_time) * 1000

        stats = self._stats.get(id(listener))
        if stats is None:
            stats = self._stats[id(listener)] = {
                "listener": listener,
                "name": name,
                "calls": 0,
                "errors": 0,
                "total_ms": 0.0,
            }
        stats["calls"] += 1
        stats["total_ms"] += outcome.duration_ms
        if not outcome.success:
            stats["errors"] += 1

        return outcome

    def _log_failure(
        self,
        phase: Phase,
        outcome: ListenerOutcome,
        test_instance: Any,
        test_method: Any,
        exception: BaseException | None,
    ) -> None:
        action = _FAILURE_MESSAGES[phase].format(
            test_class=self._class_name,
            instance=test_instance,
            method=getattr(test_method, "__qualname__", test_method),
            exception=exception,
        )
        level = logging.ERROR if phase is Phase.PREPARE_TEST_INSTANCE else logging.WARNING
        logger.log(
            level,
            f"Caught exception while allowing listener [{outcome.listener_name}] to {action}",
            exc_info=outcome.error,
        )

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Get listener execution statistics.

        Stats are tracked per listener object. A listener registered twice
        has one entry; distinct listeners sharing a name are listed as
        ``name``, ``name#2`` and so on, in the order they first ran.

        Returns:
            Dictionary mapping listener labels to stats (calls, errors, total_ms)
        """
        result: dict[str, dict[str, Any]] = {}
        for stats in self._stats.values():
            label = stats["name"]
            suffix = 2
            while label in result:
                label = f"{stats['name']}#{suffix}"
                suffix += 1
            result[label] = {
                "calls": stats["calls"],
                "errors": stats["errors"],
                "total_ms": stats["total_ms"],
            }
        return result

    def __repr__(self) -> str:
        return (
            f"LifecycleDispatcher(test_class={self._class_name}, "
            f"listeners={len(self._registry)})"
        )
