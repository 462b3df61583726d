"""Tests for the logging subsystem."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from toolkeeper.infrastructure.observability import (APP_LOGGER_NAME,
                                                     ContextualFormatter,
                                                     configure_logging,
                                                     log_context,
                                                     shutdown_logging)
from toolkeeper.services import employees


@pytest.fixture
def configured(tmp_path):
    logger = configure_logging(directory=tmp_path / "Logs", file_name="app.log")
    yield logger, tmp_path / "Logs" / "app.log"
    shutdown_logging()


def _installed_handlers() -> list[logging.Handler]:
    return [
        h for h in logging.getLogger().handlers
        if isinstance(h.formatter, ContextualFormatter)
    ]


def test_configure_installs_console_and_rolling_file_sinks(configured):
    logger, _ = configured
    handlers = _installed_handlers()

    assert logger.name == APP_LOGGER_NAME
    assert len(handlers) == 2
    file_handler = next(h for h in handlers if isinstance(h, TimedRotatingFileHandler))
    console_handler = next(h for h in handlers if not isinstance(h, TimedRotatingFileHandler))
    assert file_handler.level == logging.WARNING
    assert file_handler.when == "MIDNIGHT"
    assert console_handler.level == logging.INFO


def test_file_sink_only_keeps_warnings_and_above(configured):
    logger, log_file = configured

    logger.info("routine message")
    logger.warning("something odd")
    logger.error("something broke")
    for handler in _installed_handlers():
        handler.flush()

    contents = log_file.read_text(encoding="utf-8")
    assert "routine message" not in contents
    assert "something odd" in contents
    assert "something broke" in contents


def test_configure_is_idempotent(configured, tmp_path):
    logger, _ = configured

    again = configure_logging(directory=tmp_path / "elsewhere")

    assert again is logger
    assert len(_installed_handlers()) == 2
    assert not (tmp_path / "elsewhere").exists()


def test_shutdown_detaches_handlers(tmp_path):
    configure_logging(directory=tmp_path / "Logs")

    shutdown_logging()

    assert _installed_handlers() == []


def test_log_context_appends_fields():
    formatter = ContextualFormatter("%(message)s")
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "hello", None, None)

    with log_context(path="/api/tools", method="GET"):
        inside = formatter.format(record)
    outside = formatter.format(record)

    assert inside == "hello [path=/api/tools method=GET]"
    assert outside == "hello"


def test_module_loggers_write_once_through_configured_sinks(tmp_path, capsys):
    configure_logging(directory=tmp_path / "Logs")
    try:
        employees._logger.info("Created employee 1")
    finally:
        shutdown_logging()

    assert employees._logger.handlers == []
    assert capsys.readouterr().err.count("Created employee 1") == 1
