"""Adapter exception types.

Every failure reported by the Redis client is re-raised as one of these
errors so callers (the rate limiter) can decide whether to fail open, fail
closed or retry without depending on the client library's exception types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Fields are optional; adapters fill in what they know.
    """

    command: str
    queued_commands: int
    key_hash: str
    backend_error: str
    hint: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for adapter and configuration failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when configuration validation fails."""


class AdapterError(AppError):
    """Base class for failures surfaced by the command adapter."""


class CommandError(AdapterError):
    """Raised when the backend rejects a command or batch, or the connection fails."""


class ScriptError(CommandError):
    """Raised when the scripting engine reports a compile or runtime error."""


class NoScriptError(CommandError):
    """Raised when EVALSHA references a hash the backend does not know."""


class PipelineReusedError(AdapterError):
    """Raised when a pipeline is queued to or executed after it was executed."""
