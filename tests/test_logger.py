"""Tests for logger module."""

import logging
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from sentinel.util import logger as logger_module
from sentinel.util.logger import (
    DATE_FORMAT,
    LOG_FORMAT,
    ColorFormatter,
    PromptToolkitHandler,
    get_log_filepath,
    get_logger,
    setup_logger,
    should_use_color,
)


def make_record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
        func="test_func",
    )


class TestShouldUseColor:
    """Tests for should_use_color function."""

    @patch('sys.stderr.isatty')
    def test_should_use_color_tty(self, mock_isatty):
        mock_isatty.return_value = True
        assert should_use_color() is True

    @patch('sys.stderr.isatty')
    def test_should_use_color_no_tty(self, mock_isatty):
        mock_isatty.return_value = False
        assert should_use_color() is False

    @patch('sys.stderr.isatty')
    def test_should_use_color_exception(self, mock_isatty):
        mock_isatty.side_effect = Exception("Error")
        assert should_use_color() is False


class TestColorFormatter:
    """Tests for ColorFormatter class."""

    def test_error_is_wrapped_in_red(self):
        formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        formatted = formatter.format(make_record(logging.ERROR, "Error message"))

        assert formatted.startswith("\033[31m")
        assert formatted.endswith("\033[0m")
        assert "Error message" in formatted

    def test_unknown_level_is_not_colored(self):
        formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        record = make_record(25, "Custom level")
        record.levelname = "NOTICE"

        formatted = formatter.format(record)

        assert "\033[" not in formatted


class TestPromptToolkitHandler:
    """Tests for PromptToolkitHandler class."""

    @patch("sentinel.util.logger.print_formatted_text")
    def test_emit_prints_formatted_message(self, mock_print):
        handler = PromptToolkitHandler(formatter=logging.Formatter("%(message)s"))

        handler.emit(make_record(logging.INFO, "hello"))

        mock_print.assert_called_once()

    @patch("sentinel.util.logger.print_formatted_text", side_effect=RuntimeError("no tty"))
    def test_emit_errors_are_handled(self, mock_print):
        handler = PromptToolkitHandler()

        with patch.object(handler, "handleError") as mock_handle_error:
            handler.emit(make_record(logging.INFO, "hello"))

        mock_handle_error.assert_called_once()


class TestSetupLogger:
    """Tests for setup_logger and get_logger."""

    def test_setup_logger_configures_logger(self):
        logger = setup_logger("sentinel_test_logger_1")

        assert logger.name == "sentinel_test_logger_1"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 2

    def test_setup_logger_returns_existing(self):
        logger1 = setup_logger("sentinel_test_logger_2")
        logger2 = setup_logger("sentinel_test_logger_2")

        assert logger1 is logger2
        assert len(logger2.handlers) == 2

    def test_get_logger_same_name_returns_same(self):
        assert get_logger("sentinel_test_logger_3") is get_logger("sentinel_test_logger_3")

    def test_noisy_loggers_are_silenced(self):
        assert logging.getLogger("openai").level == logging.ERROR
        assert logging.getLogger("httpx").level == logging.ERROR


class TestLogFilepath:
    """Tests for the shared session log file."""

    def test_log_filepath_is_stable(self):
        assert get_log_filepath() == get_log_filepath()

    def test_new_session_file_when_none_recent(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(logger_module, "LOGS_DIR", tmp_path)
        monkeypatch.setattr(logger_module, "LOG_FILEPATH", None)

        path = get_log_filepath()

        assert path.parent == tmp_path
        assert path.suffix == ".log"

    def test_recent_file_is_reused(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(logger_module, "LOGS_DIR", tmp_path)
        monkeypatch.setattr(logger_module, "LOG_FILEPATH", None)

        existing = tmp_path / (datetime.now().strftime(DATE_FORMAT) + ".log")
        existing.write_text("", encoding="utf-8")

        assert get_log_filepath() == existing
