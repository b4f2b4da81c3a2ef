"""Core utilities: structured logging and error types."""

from inbox_router.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    ModelInvocationError,
    ProviderNotConfiguredError,
    RouterError,
)
from inbox_router.core.logging import bind_session_id, configure_logging, get_logger

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ModelInvocationError",
    "ProviderNotConfiguredError",
    "RouterError",
    "bind_session_id",
    "configure_logging",
    "get_logger",
]
