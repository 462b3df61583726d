"""Logging utilities for ToolKeeper.

This module owns the process-wide logging setup: a console sink for
informational output and a daily rolling file sink for warnings and errors.
It also provides helpers for structured, contextual log lines.

The application logger returned by :func:`configure_logging` is passed
explicitly to the components that need it (container, startup orchestrator,
error middleware) rather than being looked up ambiently.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

APP_LOGGER_NAME = "toolkeeper"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ---------------------------------------------------------------------------
# Context variables for structured logging
# ---------------------------------------------------------------------------

_log_context: ContextVar[dict[str, Any]] = ContextVar(
    "log_context", default={})


class ContextualFormatter(logging.Formatter):
    """Formatter that appends context fields to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        ctx = _log_context.get()
        if ctx:
            ctx_str = " ".join(f"{k}={v}" for k, v in ctx.items())
            # Keep the context on the first line so tracebacks stay readable.
            head, sep, tail = message.partition("\n")
            message = f"{head} [{ctx_str}]{sep}{tail}"
        return message


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Temporarily add context fields to all log messages.

    Usage::

        with log_context(method="GET", path="/api/tools"):
            logger.warning("Tool not found")  # message includes context

    Fields are merged with any existing context and restored on exit.
    """
    current = _log_context.get()
    merged = {**current, **fields}
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

_configured = False
_handlers: list[logging.Handler] = []


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def build_console_handler(level: int | str = logging.INFO) -> logging.Handler:
    """Return a stream handler writing to stderr at ``level`` and above."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_parse_level(level))
    handler.setFormatter(ContextualFormatter(_FORMAT))
    return handler


def build_file_handler(
    directory: str | Path,
    file_name: str = "toolkeeper.log",
    level: int | str = logging.WARNING,
    retention_days: int = 31,
) -> TimedRotatingFileHandler:
    """Return a file handler that rolls over at midnight.

    Rotated files get a ``.YYYY-MM-DD`` suffix; at most ``retention_days``
    of them are kept.
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path / file_name,
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(_parse_level(level))
    handler.setFormatter(ContextualFormatter(_FORMAT))
    return handler


def configure_logging(
    *,
    directory: str | Path = "Logs",
    file_name: str = "toolkeeper.log",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.WARNING,
    retention_days: int = 31,
    third_party_level: int = logging.WARNING,
) -> logging.Logger:
    """Configure application-wide logging and return the application logger.

    Call this once at startup, before the application begins serving. Later
    calls return the already configured logger without touching handlers.

    Args:
        directory: Directory for the rolling log file.
        file_name: Base name of the rolling log file.
        console_level: Minimum level written to the console.
        file_level: Minimum level written to the rolling file.
        retention_days: Number of rotated files to keep.
        third_party_level: Log level for noisy third-party libraries.

    Returns:
        The ``toolkeeper`` logger.
    """
    global _configured
    if _configured:
        return logging.getLogger(APP_LOGGER_NAME)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any existing handlers to avoid duplicates
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    _handlers[:] = [
        build_console_handler(console_level),
        build_file_handler(directory, file_name, file_level, retention_days),
    ]
    for handler in _handlers:
        root.addHandler(handler)

    # Quieten noisy third-party loggers
    for name in ("httpx", "httpcore", "asyncio", "uvicorn.access"):
        logging.getLogger(name).setLevel(third_party_level)

    _configured = True
    return logging.getLogger(APP_LOGGER_NAME)


def shutdown_logging() -> None:
    """Flush and detach the handlers installed by :func:`configure_logging`."""
    global _configured
    root = logging.getLogger()
    for handler in _handlers:
        handler.flush()
        handler.close()
        root.removeHandler(handler)
    _handlers.clear()
    _configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given name.

    The logger has no handlers of its own; records propagate to the sinks
    installed by :func:`configure_logging`.

    Args:
        name: Name of the logger (typically __name__).

    Returns:
        A logging.Logger instance.
    """
    return logging.getLogger(name)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log an exception with context fields.

    Args:
        logger: Logger instance.
        message: Human-readable message describing the error.
        exc: The exception that was raised.
        **context: Additional context fields to include.
    """
    with log_context(**context):
        logger.error("%s: %s", message, exc, exc_info=exc)
