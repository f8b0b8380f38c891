"""Listener contract, registry and loading."""

from lifecyclekit.listeners.base import LifecycleListener, is_listener, listener_name
from lifecyclekit.listeners.loader import ENTRY_POINT_GROUP, ListenerLoader
from lifecyclekit.listeners.registry import ListenerRegistry
from lifecyclekit.listeners.types import (
    ErrorKind,
    ListenerOutcome,
    Phase,
    PhaseResult,
    Traversal,
)

__all__ = [
    "ENTRY_POINT_GROUP",
    "ErrorKind",
    "LifecycleListener",
    "ListenerLoader",
    "ListenerOutcome",
    "ListenerRegistry",
    "Phase",
    "PhaseResult",
    "Traversal",
    "is_listener",
    "listener_name",
]
