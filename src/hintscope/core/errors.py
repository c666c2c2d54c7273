"""hintscope error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index (parsing, scope building, request lifecycle)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Index (3xxx)
    PARSE_FAILURE = 3001
    MALFORMED_NODE = 3002
    STALE_REQUEST = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class HintScopeError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_FAILURE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(HintScopeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ParseFailure(HintScopeError):
    """No scope tree could be produced for a text.

    Dependent lookups degrade to keyword-only hint lists; the failure never
    affects other files.
    """

    @property
    def line(self) -> int | None:
        """1-based line of the last syntax error, if known."""
        line = self.details.get("line")
        return int(line) if line is not None else None

    @classmethod
    def syntax_error(cls, line: int, attempts: int) -> "ParseFailure":
        return cls(
            code=ErrorCode.PARSE_FAILURE,
            message=f"Syntax error at line {line} after {attempts} attempt(s)",
            details={"line": line, "attempts": attempts},
        )

    @classmethod
    def from_malformed(cls, error: "MalformedNodeError") -> "ParseFailure":
        return cls(
            code=ErrorCode.PARSE_FAILURE,
            message=f"Scope building aborted: {error.message}",
            details=dict(error.details),
        )


class MalformedNodeError(HintScopeError):
    """The scope builder met a syntax node kind it does not handle."""

    @classmethod
    def unknown_kind(cls, kind: str, offset: int) -> "MalformedNodeError":
        return cls(
            code=ErrorCode.MALFORMED_NODE,
            message=f"Unknown node kind '{kind}' at offset {offset}",
            details={"kind": kind, "offset": offset},
        )


class StaleRequestError(HintScopeError):
    """A pending inner-scope request was superseded before it resolved."""

    @classmethod
    def superseded(cls, path: str, offset: int) -> "StaleRequestError":
        return cls(
            code=ErrorCode.STALE_REQUEST,
            message=f"Request for {path} at offset {offset} superseded by a newer request",
            retryable=True,
            details={"path": path, "offset": offset, "reason": "superseded"},
        )

    @classmethod
    def discarded(cls, path: str, offset: int, reason: str) -> "StaleRequestError":
        return cls(
            code=ErrorCode.STALE_REQUEST,
            message=f"Request for {path} at offset {offset} discarded: {reason}",
            retryable=True,
            details={"path": path, "offset": offset, "reason": reason},
        )


class InternalError(HintScopeError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
