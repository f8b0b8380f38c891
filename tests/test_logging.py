"""Tests for lifecyclekit logging helpers."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from lifecyclekit import DispatcherSettings
from lifecyclekit.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_log_context,
    log_context,
)


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging changes to the lifecyclekit logger."""
    logger = logging.getLogger("lifecyclekit")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestLogContext:
    def test_nested_context(self):
        with log_context(test_class="A"):
            with log_context(phase="after_test_class"):
                assert get_log_context() == {"test_class": "A", "phase": "after_test_class"}
            assert get_log_context() == {"test_class": "A"}
        assert get_log_context() == {}


class TestConfigureLogging:
    """Tests for configure_logging output."""

    def test_json_output_includes_context(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)

        with log_context(phase="before_test_class"):
            logging.getLogger("lifecyclekit.manager").info("dispatching")

        record = json.loads(stream.getvalue().strip())
        assert record["level"] == "info"
        assert record["message"] == "dispatching"
        assert record["logger"] == "lifecyclekit.manager"
        assert record["context"] == {"phase": "before_test_class"}

    def test_human_readable_output(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging(level=logging.WARNING, stream=stream)

        logger = logging.getLogger("lifecyclekit.manager")
        logger.info("hidden")
        logger.warning("listener failed")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "WARNING" in output
        assert "[lifecyclekit.manager] listener failed" in output

    def test_reconfigure_replaces_handler(self, restore_root_logger):
        configure_logging()
        logger = configure_logging(json_format=True)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_json_exception_info(self):
        formatter = StructuredFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "lifecyclekit", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "boom"

    def test_human_formatter_without_colors(self):
        formatter = HumanReadableFormatter(use_colors=False)
        record = logging.LogRecord("lifecyclekit", logging.ERROR, __file__, 1, "msg", (), None)

        assert "ERROR    [lifecyclekit] msg" in formatter.format(record)

    def test_extra_fields_reach_json_records(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging(
            level="INFO",
            json_format=True,
            stream=stream,
            extra_fields={"run_id": "nightly-7", "level": "ignored"},
        )

        logging.getLogger("lifecyclekit.manager").info("dispatching")

        record = json.loads(stream.getvalue().strip())
        assert record["run_id"] == "nightly-7"
        assert record["level"] == "info"

    def test_human_output_includes_context_fields(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)

        with log_context(test_class="tests.SampleTests", phase="after_test_class"):
            logging.getLogger("lifecyclekit.manager").info("done")

        assert "done (test_class=tests.SampleTests phase=after_test_class)" in stream.getvalue()


class TestConfigureLoggingFromSettings:
    """Tests for applying DispatcherSettings to the lifecyclekit logger."""

    def test_json_logs_and_level_applied(self, restore_root_logger):
        stream = io.StringIO()
        settings = DispatcherSettings(log_level="DEBUG", json_logs=True)

        logger = configure_logging_from_settings(settings, stream=stream)
        logging.getLogger("lifecyclekit.manager").debug("before_test_class()")

        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        record = json.loads(stream.getvalue().strip())
        assert record["level"] == "debug"
        assert record["message"] == "before_test_class()"

    def test_defaults_give_human_output_at_warning(self, restore_root_logger):
        stream = io.StringIO()

        logger = configure_logging_from_settings(DispatcherSettings(), stream=stream)
        logging.getLogger("lifecyclekit.manager").info("hidden")
        logging.getLogger("lifecyclekit.manager").warning("shown")

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, HumanReadableFormatter)
        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output
