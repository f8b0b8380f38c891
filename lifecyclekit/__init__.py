"""lifecyclekit - lifecycle event dispatch for test classes.

lifecyclekit lets a test runner notify pluggable listeners around the
execution of a test class and its test methods. Listeners share an
execution context describing the class, instance, method and test
exception currently in flight.

Key Features:
    - Five lifecycle phases with well-defined ordering
    - Fail-fast setup phases, collect-and-continue teardown phases
    - Atomic context updates before every phase
    - Explicit, caller-owned cache for per-class resources
    - Configuration through YAML and LIFECYCLEKIT_* environment variables

Example:
    >>> from lifecyclekit import LifecycleDispatcher, LifecycleListener
    >>> from lifecyclekit import StaticListenerResolver
    >>>
    >>> class InjectingListener(LifecycleListener):
    ...     def prepare_test_instance(self, context):
    ...         context.test_instance.db = FakeDatabase()
    >>>
    >>> dispatcher = LifecycleDispatcher(
    ...     OrderTests, resolver=StaticListenerResolver([InjectingListener()])
    ... )
    >>> dispatcher.before_test_class()
    >>> instance = OrderTests()
    >>> dispatcher.prepare_test_instance(instance)
    >>> dispatcher.before_test_method(instance, OrderTests.test_total)
    >>> dispatcher.after_test_method(instance, OrderTests.test_total, None)
    >>> dispatcher.after_test_class()
"""

from lifecyclekit.bootstrap import (
    ConfiguredListenerResolver,
    ContextFactory,
    DefaultContextFactory,
    ListenerResolver,
    StaticListenerResolver,
)
from lifecyclekit.cache import ContextCache, ContextLoader
from lifecyclekit.config import DispatcherSettings, load_settings
from lifecyclekit.context import ExecutionContext, ExecutionContextView, ExecutionState
from lifecyclekit.errors import (
    ArgumentError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    LifecycleError,
    ListenerError,
    ListenerLoadError,
)
from lifecyclekit.listeners import (
    ErrorKind,
    LifecycleListener,
    ListenerLoader,
    ListenerOutcome,
    ListenerRegistry,
    Phase,
    PhaseResult,
    Traversal,
)
from lifecyclekit.manager import LifecycleDispatcher
from lifecyclekit.observability import (
    configure_logging,
    configure_logging_from_settings,
    log_context,
)

__version__ = "0.1.0"

__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "ConfiguredListenerResolver",
    "ContextCache",
    "ContextFactory",
    "ContextLoader",
    "DefaultContextFactory",
    "DispatcherSettings",
    "ErrorCode",
    "ErrorContext",
    "ErrorKind",
    "ExecutionContext",
    "ExecutionContextView",
    "ExecutionState",
    "LifecycleDispatcher",
    "LifecycleError",
    "LifecycleListener",
    "ListenerError",
    "ListenerLoadError",
    "ListenerLoader",
    "ListenerOutcome",
    "ListenerRegistry",
    "ListenerResolver",
    "Phase",
    "PhaseResult",
    "StaticListenerResolver",
    "Traversal",
    "configure_logging",
    "configure_logging_from_settings",
    "load_settings",
    "log_context",
]
