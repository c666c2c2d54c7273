"""Core module exports."""

from hintscope.core.errors import (
    ConfigError,
    ErrorCode,
    HintScopeError,
    InternalError,
    MalformedNodeError,
    ParseFailure,
    StaleRequestError,
)
from hintscope.core.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "HintScopeError",
    "InternalError",
    "MalformedNodeError",
    "ParseFailure",
    "StaleRequestError",
    # Logging
    "configure_logging",
    "get_logger",
]
