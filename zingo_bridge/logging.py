"""Centralised logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog import stdlib
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    unbind_contextvars,
)

from .config import settings

_LOGGING_CONFIGURED = False


def configure_logging(level: int | str | None = None) -> None:
    """Initialise structlog with a JSON formatter and contextvars support."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    resolved = level if level is not None else settings.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=resolved)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None):
    """Return a structlog logger ensuring the configuration is ready."""

    configure_logging()
    return structlog.get_logger(name)


@contextmanager
def wallet_context(**values: Any) -> Iterator[None]:
    """Bind and automatically clean wallet-related context variables."""

    if not values:
        yield
        return
    configure_logging()
    bind_contextvars(**values)
    try:
        yield
    finally:
        unbind_contextvars(*values.keys())


def reset_context() -> None:
    """Remove all bound context variables, useful for request bootstrap."""

    configure_logging()
    clear_contextvars()


__all__ = ["configure_logging", "get_logger", "reset_context", "wallet_context"]
