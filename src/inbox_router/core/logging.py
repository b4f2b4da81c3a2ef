"""Structured logging configuration for the inbox model router.

Uses structlog for JSON-formatted logs to stdout. The routing session ID is
carried via contextvars so every log entry emitted while routing a thread can
be traced back to the calling session.

Usage:
    from inbox_router.core.logging import bind_session_id, get_logger

    logger = get_logger(__name__)

    with bind_session_id("draft-123"):
        logger.info("model_routed", model_id="claude-haiku-4-5-20251001")
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

# Context variable for the routing session ID
_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)


def set_session_id(session_id: str | None) -> None:
    """Set the session ID for the current context.

    Args:
        session_id: Caller-supplied session identifier, or None to clear
    """
    _session_id.set(session_id)


def get_session_id() -> str | None:
    """Get the current session ID, if set."""
    return _session_id.get()


@contextmanager
def bind_session_id(session_id: str | None) -> Iterator[None]:
    """Bind a session ID for the duration of a block, restoring the previous one."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


def add_session_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor to add the session ID to log entries."""
    session_id = _session_id.get()
    if session_id is not None:
        event_dict.setdefault("session_id", session_id)
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON; if False, output human-readable format
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_session_id,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        A structlog BoundLogger instance configured for this application

    Example:
        logger = get_logger(__name__)
        logger.info("email_classified", category="routine_reply", latency_ms=42)
    """
    return structlog.get_logger(name)
