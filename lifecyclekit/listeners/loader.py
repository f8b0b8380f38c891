"""Listener loading from import paths and entry points.

Listeners can be named in configuration as:
- ``"package.module:ClassName"``
- ``"package.module.ClassName"``
- ``"package.module:factory"`` (any callable returning a listener)

Entry Points:
    Installed distributions may contribute default listeners under the
    ``lifecyclekit.listeners`` entry point group.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from lifecyclekit.errors import ListenerLoadError
from lifecyclekit.listeners.base import is_listener, listener_name

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "lifecyclekit.listeners"


class ListenerLoader:
    """Turns listener specifications into listener instances.

    A specification may already be a listener instance (returned as is),
    a class or zero-argument callable (called), or an import path string
    (imported, then called if callable).
    """

    def load(self, spec: Any) -> Any:
        """Load a single listener.

        Args:
            spec: Listener instance, class, factory or import path

        Returns:
            Listener instance

        Raises:
            ListenerLoadError: If the spec cannot be imported or instantiated
        """
        if isinstance(spec, str):
            target = self.import_path(spec)
            label = spec
        else:
            target = spec
            label = getattr(spec, "__qualname__", None) or repr(spec)

        if isinstance(target, type) or (callable(target) and not is_listener(target)):
            try:
                listener = target()
            except Exception as e:
                raise ListenerLoadError(label, "Failed to instantiate listener", e) from e
        else:
            listener = target

        if listener is None:
            raise ListenerLoadError(label, "Factory returned None")

        logger.debug(f"Loaded listener {listener_name(listener)} from {label}")
        return listener

    def load_all(self, specs: list[Any]) -> list[Any]:
        """Load several listeners, preserving order."""
        return [self.load(spec) for spec in specs]

    def import_path(self, path: str) -> Any:
        """Import the object named by ``module:attr`` or ``module.attr``.

        Raises:
            ListenerLoadError: If the module or attribute does not exist
        """
        if ":" in path:
            module_path, _, attr_path = path.partition(":")
        else:
            module_path, _, attr_path = path.rpartition(".")

        if not module_path or not attr_path:
            raise ListenerLoadError(path, "Expected 'module:Name' or 'module.Name'")

        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise ListenerLoadError(path, "Module not found", e) from e

        obj: Any = module
        for attr in attr_path.split("."):
            try:
                obj = getattr(obj, attr)
            except AttributeError as e:
                raise ListenerLoadError(path, f"'{attr}' not found in {module_path}", e) from e
        return obj

    def discover_entry_points(self) -> list[Any]:
        """Load listeners registered under the entry point group.

        Entry points are sorted by name so the resulting order is stable.
        """
        from importlib.metadata import entry_points

        listeners: list[Any] = []
        for ep in sorted(entry_points(group=ENTRY_POINT_GROUP), key=lambda ep: ep.name):
            try:
                target = ep.load()
            except Exception as e:
                raise ListenerLoadError(ep.name, "Failed to load entry point", e) from e
            listeners.append(self.load(target))
            logger.info(f"Loaded listener from entry point: {ep.name}")
        return listeners
