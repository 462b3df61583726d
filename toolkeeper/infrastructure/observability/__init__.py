"""Observability and logging facades."""

from .logging import (
    APP_LOGGER_NAME,
    ContextualFormatter,
    configure_logging,
    get_logger,
    log_context,
    log_exception,
    shutdown_logging,
)

__all__ = [
    "APP_LOGGER_NAME",
    "ContextualFormatter",
    "configure_logging",
    "get_logger",
    "log_context",
    "log_exception",
    "shutdown_logging",
]
