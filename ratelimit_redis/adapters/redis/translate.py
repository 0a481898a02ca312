"""Map redis-py exceptions onto adapter errors."""

from __future__ import annotations

from redis import exceptions as redis_exceptions

from ratelimit_redis.core.errors import CommandError, ErrorDetails, NoScriptError, ScriptError

# Fragments the scripting engine puts in error replies (Redis 6 and 7 wording)
_SCRIPT_ERROR_MARKERS = (
    "user_script",
    "error compiling script",
    "error running script",
    "script attempted",
)

_SCRIPT_COMMANDS = {"EVAL", "EVALSHA"}


def _is_script_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _SCRIPT_ERROR_MARKERS)


def translate_error(
    command: str,
    exc: BaseException,
    *,
    details: ErrorDetails | None = None,
) -> CommandError:
    """Build the adapter error matching a client exception.

    Args:
        command: Command (or "EXEC" for a pipeline) that failed.
        exc: Exception raised by the client.
        details: Extra structured context to attach.

    Returns:
        NoScriptError, ScriptError or CommandError. The caller raises it with
        ``from exc`` so the original traceback is kept.
    """

    error_details: ErrorDetails = {
        "command": command,
        "backend_error": type(exc).__name__,
    }
    if details:
        error_details.update(details)

    if isinstance(exc, redis_exceptions.NoScriptError):
        error_details["hint"] = "load the script with script_load() before calling evalsha()"
        return NoScriptError(
            code="redis_noscript",
            message=f"{command} failed: no script matches the given SHA1",
            details=error_details,
        )

    if (
        command in _SCRIPT_COMMANDS
        and isinstance(exc, redis_exceptions.ResponseError)
        and _is_script_error(exc)
    ):
        return ScriptError(
            code="redis_script_error",
            message=f"{command} failed: {exc}",
            details=error_details,
        )

    return CommandError(
        code="redis_command_failed",
        message=f"{command} failed: {exc}",
        details=error_details,
    )
