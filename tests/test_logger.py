"""Tests for logger.py -- setup_logging() and JsonFormatter.

Strategy: Mock logging.basicConfig to verify setup_logging passes correct args,
since pytest's log capture plugin interferes with actual basicConfig calls.
"""

import json
import logging
import sys
from unittest.mock import patch

from vault_publisher.logger import JsonFormatter, setup_logging


class TestSetupLogging:
    """Tests for setup_logging()."""

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_logs_to_stderr(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()

        kwargs = mock_basic.call_args[1]
        (handler,) = kwargs["handlers"]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
        assert kwargs["level"] == logging.INFO

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_log_file_adds_file_handler(self, mock_basic, tmp_path):
        setup_logging(log_file=str(tmp_path / "publisher.log"))

        handlers = mock_basic.call_args[1]["handlers"]
        file_handlers = [h for h in handlers if isinstance(h, logging.FileHandler)]
        assert len(handlers) == 2
        assert len(file_handlers) == 1
        assert "%(name)s" in file_handlers[0].formatter._fmt
        for h in file_handlers:
            h.close()

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_config_level_used(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(level="warning")

        assert mock_basic.call_args[1]["level"] == logging.WARNING

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_env_beats_config_level(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(level="DEBUG")

        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_debug_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(debug=True)

        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_unknown_level_falls_back_to_info(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")
        setup_logging()

        assert mock_basic.call_args[1]["level"] == logging.INFO

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_json_format(self, mock_basic):
        setup_logging(debug_format="json")

        handlers = mock_basic.call_args[1]["handlers"]
        assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)

    @patch("vault_publisher.logger.logging.basicConfig")
    def test_third_party_silenced(self, _mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("charset_normalizer").level == logging.WARNING


class TestJsonFormatter:
    def _record(self, msg="hello %s", args=("world",), exc_info=None):
        return logging.LogRecord(
            name="vault_publisher.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=args,
            exc_info=exc_info,
        )

    def test_single_line_json(self):
        output = JsonFormatter().format(self._record())

        assert "\n" not in output
        entry = json.loads(output)
        assert entry["level"] == "INFO"
        assert entry["logger"] == "vault_publisher.test"
        assert entry["msg"] == "hello world"
        assert "ts" in entry
        assert "exc" not in entry

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()

        entry = json.loads(JsonFormatter().format(self._record(exc_info=exc_info)))

        assert "RuntimeError: boom" in entry["exc"]
