"""Tests for the lifecyclekit error hierarchy."""

from __future__ import annotations

import pytest

from lifecyclekit import (
    ArgumentError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    LifecycleError,
    ListenerError,
    ListenerLoadError,
    Phase,
)


class TestErrorCode:
    @pytest.mark.parametrize(
        "code, category",
        [
            (ErrorCode.NULL_TEST_INSTANCE, "argument"),
            (ErrorCode.INVALID_CONFIG, "configuration"),
            (ErrorCode.LISTENER_FAILED, "listener"),
            (ErrorCode.UNKNOWN, "unknown"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category


class TestLifecycleError:
    """Tests for formatting and serialization."""

    def test_str_includes_code_and_location(self):
        error = ArgumentError(
            "Test instance must not be None",
            context=ErrorContext(test_class="tests.SampleTests", phase="prepare_test_instance"),
        )

        assert str(error) == (
            "[E101] Test instance must not be None | "
            "at class=tests.SampleTests > phase=prepare_test_instance"
        )

    def test_argument_error_is_value_error(self):
        assert issubclass(ArgumentError, ValueError)
        assert issubclass(ArgumentError, LifecycleError)

    def test_extra_context_and_to_dict(self):
        cause = OSError("disk full")
        error = ConfigurationError("Bad config", cause=cause, config_path="x.yaml")

        data = error.to_dict()

        assert data["error_code"] == "E201"
        assert data["error_type"] == "ConfigurationError"
        assert data["cause"] == "disk full"
        assert data["context"]["extra"] == {"config_path": "x.yaml"}
        assert data["suggestions"] == ConfigurationError.default_suggestions

    def test_format_verbose(self):
        error = ListenerLoadError("pkg:Missing", "Module not found", ImportError("pkg"))

        text = error.format_verbose()

        assert "Error [E202]: Failed to load listener 'pkg:Missing': Module not found" in text
        assert "Caused by: ImportError: pkg" in text
        assert "Suggestions:" in text

    def test_listener_error_propagates_unchanged(self, make_dispatcher, make_listener):
        error = ListenerError("listener broke", context=ErrorContext(listener="A"))
        dispatcher = make_dispatcher(make_listener("A", before_test_class=error))

        result = dispatcher.dispatch(Phase.BEFORE_TEST_CLASS)

        assert result.error is error
        assert result.error.error_code is ErrorCode.LISTENER_FAILED

    def test_custom_suggestions_override_defaults(self):
        error = ArgumentError("bad", suggestions=["do this"])

        assert error.suggestions == ["do this"]
