"""Tests for logging setup."""

import json
import logging

import pytest
import structlog

from messagemind.logging import QUIET_LOGGERS, build_formatter, setup_logging


@pytest.fixture
def restore_logging():
    """Put root handlers, levels and structlog config back after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    quiet_levels = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    yield
    root.handlers = handlers
    root.setLevel(level)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)
    structlog.reset_defaults()


class TestFormatter:
    """Tests for build_formatter function."""

    def test_stdlib_record_rendered_as_json(self):
        """Test that third-party stdlib records share the JSON layout."""
        record = logging.LogRecord(
            "apscheduler.scheduler", logging.WARNING, __file__, 1, "Run time of job %s was missed", ("daily_reset",), None
        )
        data = json.loads(build_formatter(debug=False).format(record))
        assert data["event"] == "Run time of job daily_reset was missed"
        assert data["logger"] == "apscheduler.scheduler"
        assert data["level"] == "warning"
        assert "timestamp" in data

    def test_console_renderer_in_debug(self):
        record = logging.LogRecord("messagemind.app", logging.INFO, __file__, 1, "server_running", (), None)
        output = build_formatter(debug=True).format(record)
        assert "server_running" in output
        with pytest.raises(json.JSONDecodeError):
            json.loads(output)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_single_root_handler(self, restore_logging):
        setup_logging(debug=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.INFO

    def test_debug_level(self, restore_logging):
        setup_logging(debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_loggers(self, restore_logging):
        """Test that scheduler chatter is limited to warnings."""
        setup_logging(debug=True)
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
