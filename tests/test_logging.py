"""Unit tests for logging setup."""

import json
import logging
import sys

from ferrocash.core.logging import JsonFormatter, configure_logging, get_logger


def _record(message: str, *args, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="ferrocash.sessions",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=args,
        exc_info=exc_info,
    )


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_quotes_in_message_stay_valid_json(self) -> None:
        line = JsonFormatter().format(_record('Closed "Caja 1" with %s', 'shortage \\ "-50.00"'))

        entry = json.loads(line)

        assert entry["message"] == 'Closed "Caja 1" with shortage \\ "-50.00"'
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "ferrocash.sessions"
        assert "\n" not in line

    def test_exception_is_included(self) -> None:
        try:
            raise ValueError("bad count")
        except ValueError:
            exc_info = sys.exc_info()

        entry = json.loads(JsonFormatter().format(_record("close failed", exc_info=exc_info)))

        assert "ValueError: bad count" in entry["exception"]
        assert "exception" not in json.loads(JsonFormatter().format(_record("ok")))


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_handler_replaces_previous(self) -> None:
        configure_logging("debug")
        logger = configure_logging("debug", json_format=True)

        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_child_loggers(self) -> None:
        assert get_logger("ledger").name == "ferrocash.ledger"
        assert get_logger().name == "ferrocash"
