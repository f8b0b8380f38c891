"""Tests for ListenerRegistry."""

from __future__ import annotations

import pytest

from lifecyclekit import ArgumentError, ListenerRegistry


class TestListenerRegistry:
    """Tests for ordering and registration."""

    def test_forward_and_reverse(self, make_listener):
        a, b, c = make_listener("A"), make_listener("B"), make_listener("C")
        registry = ListenerRegistry([a, b, c])

        assert list(registry.forward()) == [a, b, c]
        assert list(registry.reverse()) == [c, b, a]
        assert list(registry) == [a, b, c]
        assert len(registry) == 3

    def test_duplicates_allowed(self, make_listener):
        x = make_listener("X")
        registry = ListenerRegistry()

        registry.append(x)
        registry.append(x)

        assert registry.listeners == [x, x]

    def test_append_none_raises(self):
        registry = ListenerRegistry()

        with pytest.raises(ArgumentError):
            registry.append(None)

    def test_extend_is_all_or_nothing(self, make_listener):
        registry = ListenerRegistry()

        with pytest.raises(ArgumentError, match="position 1"):
            registry.extend([make_listener("A"), None, make_listener("B")])

        assert len(registry) == 0

    def test_traversal_uses_snapshot(self, make_listener):
        a, b = make_listener("A"), make_listener("B")
        registry = ListenerRegistry([a])

        seen = []
        for listener in registry.forward():
            seen.append(listener)
            registry.append(b)

        assert seen == [a]
        assert registry.listeners == [a, b]

    def test_listeners_is_live(self, make_listener):
        a = make_listener("A")
        registry = ListenerRegistry()

        registry.listeners.append(a)

        assert list(registry.reverse()) == [a]

    def test_repr(self, make_listener):
        registry = ListenerRegistry([make_listener("A"), make_listener("B")])

        assert repr(registry) == "ListenerRegistry([A, B])"
