"""Collaborators that prepare a dispatcher for a test class.

A LifecycleDispatcher needs two things it does not build itself: the ordered
listeners that apply to the class, and a fresh ExecutionContext bound to it.
ListenerResolver and ContextFactory supply them. Both are plain objects passed
in by the caller, so a runner can share one ContextCache across classes
without any global state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from lifecyclekit.cache import ContextCache, ContextLoader
from lifecyclekit.config import DispatcherSettings
from lifecyclekit.context import ExecutionContext
from lifecyclekit.errors import ConfigurationError, ErrorContext
from lifecyclekit.listeners.loader import ListenerLoader

logger = logging.getLogger(__name__)

# Class attribute through which a test class declares its own listeners.
CLASS_LISTENERS_ATTR = "listeners"


class ListenerResolver(ABC):
    """Produces the ordered listeners for a test class."""

    @abstractmethod
    def resolve(self, test_class: type) -> list[Any]:
        """Return listener instances in registration order."""
        ...


class StaticListenerResolver(ListenerResolver):
    """Resolver returning the same listeners for every class.

    Useful for testing or when a runner builds the list itself.
    """

    def __init__(self, listeners: Iterable[Any] = ()) -> None:
        self._listeners = list(listeners)

    def resolve(self, test_class: type) -> list[Any]:
        return list(self._listeners)


class ConfiguredListenerResolver(ListenerResolver):
    """Resolver driven by DispatcherSettings.

    Order: settings.default_listeners, then entry point listeners (when
    enabled), then the ``listeners`` sequence declared on the test class
    (when honored). Each entry is loaded through a ListenerLoader.
    """

    def __init__(
        self,
        settings: DispatcherSettings | None = None,
        loader: ListenerLoader | None = None,
    ) -> None:
        self.settings = settings or DispatcherSettings()
        self.loader = loader or ListenerLoader()

    def resolve(self, test_class: type) -> list[Any]:
        listeners = self.loader.load_all(list(self.settings.default_listeners))

        if self.settings.discover_entry_points:
            listeners.extend(self.loader.discover_entry_points())

        if self.settings.honor_class_listeners:
            declared = getattr(test_class, CLASS_LISTENERS_ATTR, None)
            if declared is None:
                declared = ()
            if not isinstance(declared, (list, tuple)):
                raise ConfigurationError(
                    f"{test_class.__qualname__}.{CLASS_LISTENERS_ATTR} must be a list "
                    f"or tuple of listeners, got {type(declared).__name__}",
                    context=ErrorContext(test_class=test_class.__qualname__),
                )
            listeners.extend(self.loader.load_all(list(declared)))

        logger.debug(
            f"Resolved {len(listeners)} listener(s) for {test_class.__qualname__}"
        )
        return listeners


class ContextFactory(ABC):
    """Builds the ExecutionContext for a test class."""

    @abstractmethod
    def create(self, test_class: type) -> ExecutionContext:
        ...


class DefaultContextFactory(ContextFactory):
    """Creates contexts bound to a shared cache and optional loader.

    Args:
        cache: Cache shared by every context this factory creates
        loader: Builds the cached resource; without one,
            ``get_application_context`` raises ConfigurationError
    """

    def __init__(
        self,
        cache: ContextCache | None = None,
        loader: ContextLoader | None = None,
    ) -> None:
        self.cache = cache if cache is not None else ContextCache()
        self.loader = loader

    @classmethod
    def from_settings(
        cls,
        settings: DispatcherSettings,
        loader: ContextLoader | None = None,
    ) -> DefaultContextFactory:
        return cls(cache=ContextCache(max_size=settings.cache_max_size), loader=loader)

    def create(self, test_class: type) -> ExecutionContext:
        return ExecutionContext(test_class, cache=self.cache, loader=self.loader)
