"""Tests for structured logging setup."""

import io
import json
import logging

import pytest
import structlog

from refertrack.logging_config import build_processors, configure_logging, get_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBuildProcessors:
    """Tests for the processor chain."""

    def test_json_ends_with_json_renderer(self):
        processors = build_processors("json")
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.processors.format_exc_info in processors

    def test_console_ends_with_console_renderer(self):
        assert isinstance(build_processors("console")[-1], structlog.dev.ConsoleRenderer)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            build_processors("xml")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_lines_go_to_stream(self, restore_logging):
        stream = io.StringIO()
        configure_logging(level="info", log_format="json", stream=stream)

        get_logger("refertrack.tests").info("user_registered", user_id=7)

        event = json.loads(stream.getvalue().splitlines()[-1])
        assert event["event"] == "user_registered"
        assert event["user_id"] == 7
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters(self, restore_logging):
        stream = io.StringIO()
        configure_logging(level="warning", log_format="json", stream=stream)

        logger = get_logger("refertrack.tests")
        logger.info("hidden")
        logger.warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()
        assert logging.getLogger().level == logging.WARNING
