"""Structured logging setup with structlog and correlation IDs.

Two renderers are available: "json" for machine-readable lines and
"console" for colored development output.

Every coordinator load gets its own correlation ID. It lives in a ContextVar
and is added to each entry, so all events of one refresh (store read,
provider fetches, store replace) can be grouped together.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from uuid import uuid4

import structlog

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Chatty third-party loggers kept at WARNING unless running at DEBUG.
_LIBRARY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine")


def set_correlation_id(cid: str) -> Token[str]:
    """Set the correlation ID for the current context.

    Returns the token that restores the previous value.
    """
    return _correlation_id.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    """Restore the correlation ID that was current before ``set_correlation_id``."""
    _correlation_id.reset(token)


def get_correlation_id() -> str:
    """Get the correlation ID for the current context."""
    return _correlation_id.get()


def new_correlation_id() -> str:
    """Generate a fresh 12-hex-digit correlation ID."""
    return uuid4().hex[:12]


def _add_correlation_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    cid = get_correlation_id()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Output format - "json" or "console".
    """
    numeric_level = getattr(logging, level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_correlation_id,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    library_level = (
        numeric_level if numeric_level <= logging.DEBUG
        else max(numeric_level, logging.WARNING)
    )
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
