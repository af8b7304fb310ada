"""
Tests for logging configuration.

This module tests the logging setup, environment variable handling, file
logging, JSON formatting and the performance timing helpers.
"""

import json
import logging
import logging.handlers
import os
import sys
import tempfile
from unittest.mock import patch

import pytest

from netanalyzer.common.logging_config import (
    setup_logging,
    get_logger,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    LoggingSettings,
    ROOT_LOGGER_NAME,
    PERFORMANCE_LOGGER_NAME,
    ENV_LOG_LEVEL,
    ENV_LOG_FILE,
    ENV_LOG_DIR,
    ENV_LOG_CONSOLE,
    ENV_LOG_JSON,
    DEFAULT_LOG_FILE_NAME
)


def _reset_root_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestSetupLogging:
    """Test the main setup_logging function."""

    def setup_method(self):
        """Clear any existing handlers before each test."""
        _reset_root_logger()

    def teardown_method(self):
        _reset_root_logger()

    def test_basic_setup(self):
        """Test basic logging setup with defaults."""
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging()

        assert logger.name == "netanalyzer"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert not logger.propagate

    def test_custom_level(self):
        """Test setting custom log level."""
        logger = setup_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = setup_logging(level="WARNING", force_setup=True)
        assert logger.level == logging.WARNING

    def test_setup_is_idempotent_without_force(self):
        """Test that a second call keeps the existing configuration."""
        first = setup_logging(level="DEBUG")
        second = setup_logging(level="ERROR")
        assert first is second
        assert second.level == logging.DEBUG
        assert len(second.handlers) == 1

    def test_invalid_level(self):
        """Test that invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid logging level"):
            setup_logging(level="INVALID_LEVEL")

    def test_file_logging(self):
        """Test file logging setup."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "test.log")

            logger = setup_logging(log_file=log_file, console=False)

            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)

            logger.info("Test message")
            logger.handlers[0].flush()

            with open(log_file, "r") as f:
                assert "Test message" in f.read()

            _reset_root_logger()

    def test_log_dir_uses_default_file_name(self):
        """Test that a log directory alone enables file logging."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = os.path.join(temp_dir, "nested", "logs")
            logger = setup_logging(log_dir=log_dir, console=False)

            assert os.path.isdir(log_dir)
            assert logger.handlers[0].baseFilename == os.path.join(log_dir, DEFAULT_LOG_FILE_NAME)

            _reset_root_logger()

    def test_console_disabled(self):
        """Test disabling console logging."""
        with patch.dict(os.environ, {}, clear=True):
            logger = setup_logging(console=False)
        assert len(logger.handlers) == 0

    def test_json_formatting(self):
        """Test that json_format installs the JSON formatter."""
        logger = setup_logging(json_format=True)
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestEnvironmentVariables:
    """Test configuration through environment variables."""

    def setup_method(self):
        _reset_root_logger()

    def teardown_method(self):
        _reset_root_logger()

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR"}):
            logger = setup_logging()
        assert logger.level == logging.ERROR

    def test_parameter_overrides_env(self):
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR"}):
            logger = setup_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

    def test_log_file_from_env(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "env.log")
            with patch.dict(os.environ, {ENV_LOG_FILE: log_file, ENV_LOG_CONSOLE: "false"}):
                logger = setup_logging()

            assert len(logger.handlers) == 1
            assert logger.handlers[0].baseFilename == log_file
            _reset_root_logger()

    def test_log_dir_from_env(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch.dict(os.environ, {ENV_LOG_DIR: temp_dir, ENV_LOG_CONSOLE: "0"}):
                logger = setup_logging()

            assert logger.handlers[0].baseFilename == os.path.join(temp_dir, DEFAULT_LOG_FILE_NAME)
            _reset_root_logger()

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("yes", True), ("1", True), ("on", True),
        ("false", False), ("no", False), ("0", False), ("off", False),
    ])
    def test_boolean_env_parsing(self, value, expected):
        env = {ENV_LOG_JSON: value}
        with patch.dict(os.environ, env):
            logger = setup_logging(force_setup=True)
        assert isinstance(logger.handlers[0].formatter, JSONFormatter) is expected


class TestLoggingSettings:
    """Test resolution of logging options."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = LoggingSettings.resolve()

        assert settings.level == "INFO"
        assert settings.log_file is None
        assert settings.console
        assert not settings.json_format
        assert settings.backup_count == 5

    def test_arguments_beat_environment(self):
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR", ENV_LOG_JSON: "yes"}):
            settings = LoggingSettings.resolve(level="DEBUG", json_format=False)

        assert settings.level == "DEBUG"
        assert not settings.json_format

    def test_unrecognised_flag_uses_default(self):
        with patch.dict(os.environ, {ENV_LOG_CONSOLE: "maybe"}):
            assert LoggingSettings.resolve().console

    def test_numeric_level(self):
        assert LoggingSettings.resolve(level="warning").numeric_level() == logging.WARNING
        with pytest.raises(ValueError, match="Invalid logging level"):
            LoggingSettings.resolve(level="LOUD").numeric_level()


class TestJSONFormatter:
    """Test the JSON formatter."""

    def _record(self, **extra):
        record = logging.LogRecord(
            name="netanalyzer.network.paths",
            level=logging.INFO,
            pathname="paths.py",
            lineno=42,
            msg="Found %d paths",
            args=(3,),
            exc_info=None,
            func="dijkstra"
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_json_formatting(self):
        output = json.loads(JSONFormatter().format(self._record()))
        assert output["level"] == "INFO"
        assert output["logger"] == "netanalyzer.network.paths"
        assert output["message"] == "Found 3 paths"
        assert output["function"] == "dijkstra"
        assert output["line"] == 42
        assert "timestamp" in output

    def test_json_with_extra_fields(self):
        output = json.loads(JSONFormatter().format(self._record(operation="dijkstra", duration=0.5)))
        assert output["operation"] == "dijkstra"
        assert output["duration"] == 0.5

    def test_json_with_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()

        output = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in output["exception"]


class TestUtilityFunctions:
    """Test module-level helpers."""

    def test_get_logger(self):
        logger = get_logger("netanalyzer.test")
        assert logger.name == "netanalyzer.test"
        assert logger is logging.getLogger("netanalyzer.test")

    def test_log_function_entry(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="netanalyzer.debug"):
            log_function_entry("pagerank", n_nodes=10, damping_factor=0.85)

        assert "Entering pagerank(n_nodes=10, damping_factor=0.85)" in caplog.text

    def test_log_performance_metric(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=PERFORMANCE_LOGGER_NAME):
            log_performance_metric("max_flow", 1.23456, {"nodes": 4})

        assert "Performance: max_flow completed in 1.235s (nodes=4)" in caplog.text
        record = caplog.records[-1]
        assert record.operation == "max_flow"
        assert record.duration == pytest.approx(1.23456)


class TestLoggingTimer:
    """Test the LoggingTimer context manager."""

    def test_timer_basic_usage(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=PERFORMANCE_LOGGER_NAME):
            with LoggingTimer("louvain_communities") as timer:
                sum(range(1000))

        assert timer.duration is not None
        assert timer.duration >= 0
        assert "louvain_communities completed" in caplog.text

    def test_timer_with_details(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=PERFORMANCE_LOGGER_NAME):
            with LoggingTimer("pagerank", {"nodes": 5}):
                pass

        assert "(nodes=5)" in caplog.text

    def test_timer_logs_on_exception(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=PERFORMANCE_LOGGER_NAME):
            with pytest.raises(RuntimeError):
                with LoggingTimer("failing_operation") as timer:
                    raise RuntimeError("boom")

        assert timer.duration is not None
        assert "failing_operation failed" in caplog.text
