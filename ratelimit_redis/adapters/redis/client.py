"""Command adapter over a redis-py asyncio client.

The adapter holds a shared reference to the client. It never opens or closes
connections; whoever built the client owns its lifecycle.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Mapping, Sequence, TypeVar

from redis.exceptions import RedisError

from ratelimit_redis.adapters.redis.base import AbstractCommandAdapter, IsDenied
from ratelimit_redis.adapters.redis.encoding import (
    KeyT,
    hash_key,
    require_key,
    to_wire,
    to_wire_all,
)
from ratelimit_redis.adapters.redis.pipeline import RedisPipeline
from ratelimit_redis.adapters.redis.translate import translate_error
from ratelimit_redis.core.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisAdapter(AbstractCommandAdapter):
    """Adapter exposing the rate limiter's command vocabulary.

    All arguments are coerced to their string form before they are sent, and
    every client exception is re-raised as a CommandError (or one of its
    script-specific subclasses). Nothing is retried here.
    """

    def __init__(self, client: Redis) -> None:
        """Wrap an existing client.

        Args:
            client: A redis.asyncio.Redis (or compatible) instance. Prefer
                decode_responses=True so replies come back as str.
        """
        self._client = client

    @property
    def client(self) -> Redis:
        return self._client

    async def _run(self, command: str, call: Awaitable[T], *, key: KeyT | None = None) -> T:
        """Await a client call, logging it and translating failures."""

        started = time.perf_counter()
        try:
            result = await call
        except RedisError as exc:
            extra: dict[str, Any] = {
                "command": command,
                "error_type": type(exc).__name__,
            }
            if key:
                extra["key_hash"] = hash_key(key)
            logger.warning("redis.command_failed", extra=extra)
            raise translate_error(
                command,
                exc,
                details={"key_hash": hash_key(key)} if key else None,
            ) from exc

        if settings.log.log_commands:
            logger.debug(
                "redis.command",
                extra={
                    "command": command,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                },
            )
        return result

    async def sadd(self, key: str, *members: Any) -> int:
        """Add members to the set stored at key.

        Raises:
            ValueError: If key is empty or no members are given.
            CommandError: If the backend rejects the command.
        """
        require_key(key)
        if not members:
            raise ValueError("sadd requires at least one member")
        return await self._run("SADD", self._client.sadd(key, *to_wire_all(members)), key=key)

    async def hset(self, key: str, fields: Mapping[str, Any]) -> int:
        require_key(key)
        if not fields:
            raise ValueError("hset requires at least one field")
        mapping = {name: to_wire(value) for name, value in fields.items()}
        return await self._run("HSET", self._client.hset(key, mapping=mapping), key=key)

    async def eval(
        self,
        script: str,
        keys: Sequence[str],
        args: Sequence[Any] | None = None,
    ) -> Any:
        """Run a Lua script with EVAL.

        Args:
            script: Lua source.
            keys: Keys exposed to the script as KEYS, in order.
            args: Values exposed as ARGV, coerced to strings.

        Raises:
            ScriptError: If the script fails to compile or raises at runtime.
            CommandError: For any other backend failure. An error reply the
                script returns itself (redis.error_reply) is not an engine
                fault and surfaces here with the script's own message.
        """
        key_list = [require_key(k) for k in keys]
        return await self._run(
            "EVAL",
            self._client.eval(script, len(key_list), *key_list, *to_wire_all(args)),
        )

    async def evalsha(
        self,
        sha1: str,
        keys: Sequence[str],
        args: Sequence[Any] | None = None,
    ) -> Any:
        """Run a cached script with EVALSHA.

        Raises:
            NoScriptError: If the backend has no script for sha1.
            ScriptError: If the script raises at runtime.
            CommandError: For any other backend failure, including error
                replies returned by the script itself (see eval()).
        """
        require_key(sha1, name="sha1")
        key_list = [require_key(k) for k in keys]
        return await self._run(
            "EVALSHA",
            self._client.evalsha(sha1, len(key_list), *key_list, *to_wire_all(args)),
        )

    async def script_load(self, script: str) -> str:
        sha1 = await self._run("SCRIPT LOAD", self._client.script_load(script))
        # Clients built without decode_responses hand back bytes
        return sha1.decode() if isinstance(sha1, bytes) else sha1

    async def smismember(self, key: str, members: Sequence[Any]) -> list[IsDenied]:
        """Check membership of each member, preserving input order.

        Returns:
            A list of 0/1 flags, one per member. redis-py may reply with
            booleans or integers depending on protocol; both are normalized.
            An empty member list returns [] without a round trip.
        """
        require_key(key)
        if not members:
            return []
        flags = await self._run(
            "SMISMEMBER",
            self._client.smismember(key, to_wire_all(members)),
            key=key,
        )
        return [1 if flag else 0 for flag in flags]

    def multi(self) -> RedisPipeline:
        return RedisPipeline(self._client)
