"""Pytest fixtures for lifecyclekit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from lifecyclekit import (
    ContextCache,
    DefaultContextFactory,
    LifecycleDispatcher,
    LifecycleListener,
    StaticListenerResolver,
)
from lifecyclekit.listeners.types import Phase


class SampleTests:
    """Stand-in for a user's test class."""

    def test_create(self) -> None:
        pass

    def test_delete(self) -> None:
        pass


class RecordingListener(LifecycleListener):
    """Listener that records every hook call into a shared log.

    Each entry is ``(name, phase, (instance, method, exception))`` captured
    at call time. ``fail_on`` maps phases to the exception to raise.
    """

    def __init__(
        self,
        name: str,
        call_log: list[tuple[str, Phase, tuple[Any, Any, Any]]],
        fail_on: dict[Phase, Exception] | None = None,
    ) -> None:
        self.name = name
        self.call_log = call_log
        self.fail_on = fail_on or {}

    def _record(self, phase: Phase, context: Any) -> None:
        state = (context.test_instance, context.test_method, context.test_exception)
        self.call_log.append((self.name, phase, state))
        error = self.fail_on.get(phase)
        if error is not None:
            raise error

    def before_test_class(self, context: Any) -> None:
        self._record(Phase.BEFORE_TEST_CLASS, context)

    def prepare_test_instance(self, context: Any) -> None:
        self._record(Phase.PREPARE_TEST_INSTANCE, context)

    def before_test_method(self, context: Any) -> None:
        self._record(Phase.BEFORE_TEST_METHOD, context)

    def after_test_method(self, context: Any) -> None:
        self._record(Phase.AFTER_TEST_METHOD, context)

    def after_test_class(self, context: Any) -> None:
        self._record(Phase.AFTER_TEST_CLASS, context)


class FakeResource:
    """Cached resource that remembers whether it was closed."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def call_log() -> list[tuple[str, Phase, tuple[Any, Any, Any]]]:
    return []


@pytest.fixture
def make_listener(call_log) -> Callable[..., RecordingListener]:
    """Factory for recording listeners sharing ``call_log``."""

    def factory(name: str, **fail_on: Exception) -> RecordingListener:
        return RecordingListener(
            name,
            call_log,
            fail_on={Phase(phase): error for phase, error in fail_on.items()},
        )

    return factory


@pytest.fixture
def cache() -> ContextCache:
    return ContextCache(max_size=4)


@pytest.fixture
def make_dispatcher(cache) -> Callable[..., LifecycleDispatcher]:
    """Factory for dispatchers bound to SampleTests with explicit listeners."""

    def factory(*listeners: Any, test_class: type = SampleTests) -> LifecycleDispatcher:
        return LifecycleDispatcher(
            test_class,
            resolver=StaticListenerResolver(listeners),
            context_factory=DefaultContextFactory(cache=cache),
        )

    return factory


@pytest.fixture
def sample_instance() -> SampleTests:
    return SampleTests()


@pytest.fixture
def sample_method() -> Callable[..., None]:
    return SampleTests.test_create


@pytest.fixture
def fake_resource_type() -> type[FakeResource]:
    return FakeResource


@pytest.fixture
def sample_class() -> type[SampleTests]:
    return SampleTests
