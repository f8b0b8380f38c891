"""Ordered listener registry."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from lifecyclekit.errors import ArgumentError, ErrorCode
from lifecyclekit.listeners.base import listener_name

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """Ordered, append-only sequence of listeners.

    Duplicates are allowed: registering the same listener twice makes it
    run twice per phase. Traversals iterate over a snapshot, so a listener
    that registers more listeners mid-phase only affects later phases.

    Not thread-safe.
    """

    def __init__(self, listeners: Iterable[Any] | None = None) -> None:
        self._listeners: list[Any] = []
        if listeners is not None:
            self.extend(listeners)

    @property
    def listeners(self) -> list[Any]:
        """The live, mutable backing list."""
        return self._listeners

    def append(self, listener: Any) -> None:
        """Append a single listener.

        Raises:
            ArgumentError: If listener is None
        """
        if listener is None:
            raise ArgumentError(
                "Listener must not be None",
                error_code=ErrorCode.NULL_LISTENER,
            )
        logger.debug(f"Registering listener: {listener_name(listener)}")
        self._listeners.append(listener)

    def extend(self, listeners: Iterable[Any]) -> None:
        """Append several listeners in order.

        The batch is validated up front; on a None entry nothing is appended.

        Raises:
            ArgumentError: If any entry is None
        """
        batch = list(listeners)
        for index, listener in enumerate(batch):
            if listener is None:
                raise ArgumentError(
                    f"Listener at position {index} must not be None",
                    error_code=ErrorCode.NULL_LISTENER,
                )
        for listener in batch:
            self.append(listener)

    def forward(self) -> Iterator[Any]:
        """Iterate in registration order."""
        return iter(list(self._listeners))

    def reverse(self) -> Iterator[Any]:
        """Iterate in reverse registration order."""
        return reversed(list(self._listeners))

    def __iter__(self) -> Iterator[Any]:
        return self.forward()

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        names = ", ".join(listener_name(listener) for listener in self._listeners)
        return f"ListenerRegistry([{names}])"
