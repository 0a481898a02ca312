"""MULTI/EXEC pipeline builder.

Operations are recorded locally and only handed to the client when
execute() is awaited, so nothing reaches the backend until the whole batch is
ready. Pipelines are single-use.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from ratelimit_redis.adapters.redis.base import AbstractPipeline
from ratelimit_redis.adapters.redis.encoding import (
    require_key,
    require_keys,
    to_wire,
    to_wire_all,
)
from ratelimit_redis.adapters.redis.operations import (
    DelKeys,
    QueuedCommand,
    QueuedOperation,
    SAdd,
    SDiffStore,
    SetWithExpiry,
    SUnionStore,
)
from ratelimit_redis.adapters.redis.translate import translate_error
from ratelimit_redis.core.config import settings
from ratelimit_redis.core.errors import PipelineReusedError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class RedisPipeline(AbstractPipeline):
    """Pipeline that replays queued operations inside one MULTI/EXEC.

    The pipeline has two states: open (accepting operations) and executed
    (terminal). Any use after execute() raises PipelineReusedError.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client
        self._commands: list[QueuedCommand] = []
        self._executed = False

    def __repr__(self) -> str:  # pragma: no cover - representation only
        state = "executed" if self._executed else "open"
        return f"RedisPipeline(state={state}, queued={len(self._commands)})"

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def commands(self) -> tuple[QueuedCommand, ...]:
        """Queued low-level commands, in send order."""
        return tuple(self._commands)

    def _queue(self, operation: QueuedOperation) -> RedisPipeline:
        self._ensure_open("queue")
        self._commands.extend(operation.expand())
        return self

    def _ensure_open(self, action: str) -> None:
        if self._executed:
            raise PipelineReusedError(
                code="pipeline_reused",
                message=f"Cannot {action}: pipeline was already executed",
                details={
                    "queued_commands": len(self._commands),
                    "hint": "open a new pipeline with multi()",
                },
            )

    def sdiffstore(self, destination: str, *keys: str) -> RedisPipeline:
        return self._queue(
            SDiffStore(
                destination=require_key(destination, name="destination"),
                keys=tuple(require_keys(keys)),
            )
        )

    def delete(self, *keys: str) -> RedisPipeline:
        return self._queue(DelKeys(keys=tuple(require_keys(keys))))

    def sadd(self, key: str, *members: Any) -> RedisPipeline:
        if not members:
            raise ValueError("sadd requires at least one member")
        return self._queue(SAdd(key=require_key(key), members=tuple(to_wire_all(members))))

    def sunionstore(self, destination: str, *keys: str) -> RedisPipeline:
        return self._queue(
            SUnionStore(
                destination=require_key(destination, name="destination"),
                keys=tuple(require_keys(keys)),
            )
        )

    def set(self, key: str, value: Any, *, px: int | None = None) -> RedisPipeline:
        """Queue SET, plus PEXPIRE when px is truthy.

        Raises:
            ValueError: If px is not a whole, non-negative number of
                milliseconds. Integral floats such as 1000.0 are accepted.
        """
        if px is not None:
            if isinstance(px, bool) or not isinstance(px, (int, float)):
                raise ValueError("px must be a whole number of milliseconds")
            if isinstance(px, float) and not px.is_integer():
                raise ValueError("px must be a whole number of milliseconds")
            if px < 0:
                raise ValueError("px must be >= 0")
            px = int(px)
        return self._queue(SetWithExpiry(key=require_key(key), value=to_wire(value), px=px))

    def length(self) -> int:
        return len(self._commands)

    async def execute(self) -> list[Any]:
        """Execute every queued command atomically.

        Returns:
            One entry per low-level command, in queue order. Entries for
            commands the backend rejected inside the transaction are the
            exception instances reported by the client.

        Raises:
            PipelineReusedError: If execute() was already called.
            CommandError: If the transaction as a whole fails (connection
                error, EXECABORT).
        """

        self._ensure_open("execute")
        self._executed = True

        queued = len(self._commands)
        if not queued:
            return []

        started = time.perf_counter()
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                for command in self._commands:
                    pipe.execute_command(command.name, *command.args)
                results = await pipe.execute(raise_on_error=False)
        except RedisError as exc:
            logger.warning(
                "redis.pipeline.failed",
                extra={
                    "queued_commands": queued,
                    "error_type": type(exc).__name__,
                },
            )
            raise translate_error("EXEC", exc, details={"queued_commands": queued}) from exc

        if settings.log.log_commands:
            logger.debug(
                "redis.pipeline.execute",
                extra={
                    "queued_commands": queued,
                    "command_names": [c.name for c in self._commands],
                    "errors": sum(1 for r in results if isinstance(r, Exception)),
                    "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                },
            )

        return list(results)
