"""Execution context shared between the dispatcher and its listeners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lifecyclekit.errors import ArgumentError, ConfigurationError, ErrorCode

if TYPE_CHECKING:
    from lifecyclekit.cache import ContextCache, ContextLoader


@dataclass(frozen=True)
class ExecutionState:
    """The mutable part of the context, replaced as one value."""

    test_instance: Any = None
    test_method: Any = None
    test_exception: BaseException | None = None


_EMPTY_STATE = ExecutionState()


class ExecutionContext:
    """State of the test class currently being executed.

    The test class is fixed at construction. Instance, method and exception
    are held in a single ExecutionState that ``update_state`` swaps in one
    assignment, so readers always see a consistent triple.

    Only the dispatcher owns an ExecutionContext; listeners receive
    ``context.view``, which offers everything except ``update_state``.
    """

    def __init__(
        self,
        test_class: type,
        cache: ContextCache | None = None,
        loader: ContextLoader | None = None,
    ) -> None:
        self._test_class = test_class
        self._state = _EMPTY_STATE
        self._attributes: dict[str, Any] = {}
        self._cache = cache
        self._loader = loader
        self._view = ExecutionContextView(self)

    @property
    def test_class(self) -> type:
        return self._test_class

    @property
    def test_instance(self) -> Any:
        return self._state.test_instance

    @property
    def test_method(self) -> Any:
        return self._state.test_method

    @property
    def test_exception(self) -> BaseException | None:
        return self._state.test_exception

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def view(self) -> ExecutionContextView:
        """Read-only capability handed to listeners."""
        return self._view

    def update_state(
        self,
        test_instance: Any,
        test_method: Any,
        test_exception: BaseException | None,
    ) -> None:
        """Replace instance, method and exception together."""
        self._state = ExecutionState(test_instance, test_method, test_exception)

    # =========================================================================
    # Attributes
    # =========================================================================

    def set_attribute(self, name: str, value: Any) -> None:
        """Attach auxiliary data; a value of None removes the attribute."""
        _check_attribute_name(name)
        if value is None:
            self._attributes.pop(name, None)
        else:
            self._attributes[name] = value

    def get_attribute(self, name: str, default: Any = None) -> Any:
        _check_attribute_name(name)
        return self._attributes.get(name, default)

    def remove_attribute(self, name: str) -> Any:
        """Remove an attribute and return its previous value (or None)."""
        _check_attribute_name(name)
        return self._attributes.pop(name, None)

    def has_attribute(self, name: str) -> bool:
        _check_attribute_name(name)
        return name in self._attributes

    def attribute_names(self) -> list[str]:
        return list(self._attributes.keys())

    # =========================================================================
    # Cached resources
    # =========================================================================

    def get_application_context(self) -> Any:
        """Get the resource built for this test class, loading it if needed.

        Raises:
            ConfigurationError: If no cache/loader pair was configured
        """
        cache, loader = self._require_loader()
        return cache.get_or_create(
            loader.cache_key(self._test_class),
            lambda: loader.load(self._test_class),
        )

    def mark_application_context_dirty(self) -> None:
        """Evict the cached resource so the next access rebuilds it."""
        cache, loader = self._require_loader()
        cache.remove(loader.cache_key(self._test_class))

    def _require_loader(self) -> tuple[ContextCache, ContextLoader]:
        if self._cache is None or self._loader is None:
            raise ConfigurationError(
                f"No context loader configured for {_qualname(self._test_class)}",
                error_code=ErrorCode.NO_CONTEXT_LOADER,
                suggestions=[
                    "Pass DefaultContextFactory(cache, loader=...) to the dispatcher",
                ],
            )
        return self._cache, self._loader

    def __repr__(self) -> str:
        state = self._state
        return (
            f"ExecutionContext(test_class={_qualname(self._test_class)}, "
            f"test_instance={state.test_instance!r}, "
            f"test_method={state.test_method!r}, "
            f"test_exception={state.test_exception!r}, "
            f"attributes={self.attribute_names()!r})"
        )


class ExecutionContextView:
    """Listener-facing view over an ExecutionContext.

    Reads always reflect the owner's current state. Attributes and cached
    resources are shared with the owner.
    """

    __slots__ = ("_context",)

    def __init__(self, context: ExecutionContext) -> None:
        self._context = context

    @property
    def test_class(self) -> type:
        return self._context.test_class

    @property
    def test_instance(self) -> Any:
        return self._context.test_instance

    @property
    def test_method(self) -> Any:
        return self._context.test_method

    @property
    def test_exception(self) -> BaseException | None:
        return self._context.test_exception

    @property
    def state(self) -> ExecutionState:
        return self._context.state

    def set_attribute(self, name: str, value: Any) -> None:
        self._context.set_attribute(name, value)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._context.get_attribute(name, default)

    def remove_attribute(self, name: str) -> Any:
        return self._context.remove_attribute(name)

    def has_attribute(self, name: str) -> bool:
        return self._context.has_attribute(name)

    def attribute_names(self) -> list[str]:
        return self._context.attribute_names()

    def get_application_context(self) -> Any:
        return self._context.get_application_context()

    def mark_application_context_dirty(self) -> None:
        self._context.mark_application_context_dirty()

    def __repr__(self) -> str:
        return repr(self._context).replace("ExecutionContext(", "ExecutionContextView(", 1)


def _check_attribute_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ArgumentError(
            "Attribute name must be a non-empty string",
            error_code=ErrorCode.INVALID_ARGUMENT,
        )


def _qualname(test_class: Any) -> str:
    module = getattr(test_class, "__module__", None)
    name = getattr(test_class, "__qualname__", None) or repr(test_class)
    return f"{module}.{name}" if module else name
