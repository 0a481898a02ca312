"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to "testing" before settings are imported and provides an
in-memory stand-in for the redis-py asyncio client.
"""

import hashlib
import os
from typing import Any

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("LOG_LOG_COMMANDS", "true")

import pytest
from redis.exceptions import ConnectionError, NoScriptError, ResponseError

from ratelimit_redis.adapters.redis import RedisAdapter

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class FakeRedis:
    """Minimal in-memory double of redis.asyncio.Redis.

    Supports the commands the adapter sends. Scripts are not executed: EVAL
    and EVALSHA echo back [KEYS, ARGV], a script containing "error(" fails
    the way the scripting engine reports runtime errors, and one containing
    "error_reply(" returns its own error reply.
    """

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.expiry_ms: dict[str, int] = {}
        self.scripts: dict[str, str] = {}
        self.pipelines: list["FakePipeline"] = []
        self.fail_next_exec = False
        self.fail_commands = False

    # -- helpers -----------------------------------------------------------
    def _check_connection(self) -> None:
        if self.fail_commands:
            raise ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    def _get_set(self, key: str) -> set:
        value = self.data.get(key, set())
        if not isinstance(value, set):
            raise ResponseError(WRONGTYPE)
        return value

    def _store_set(self, destination: str, members: set) -> int:
        self.data.pop(destination, None)
        if members:
            self.data[destination] = set(members)
        return len(members)

    def _run_script(self, script: str, numkeys: int, keys_and_args: tuple) -> list:
        if "error_reply(" in script:
            # The script hands back its own error reply; no engine prefix
            raise ResponseError("MYERR boom")
        if "error(" in script:
            raise ResponseError(
                "ERR user_script:1: Script attempted to raise an error script: f_1234"
            )
        keys = list(keys_and_args[:numkeys])
        args = list(keys_and_args[numkeys:])
        return [keys, args]

    # -- commands shared by direct calls and pipelines ---------------------
    def do_sadd(self, key: str, *members: Any) -> int:
        current = self._get_set(key)
        added = {str(m) for m in members} - current
        self.data[key] = current | added
        return len(added)

    def do_del(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry_ms.pop(key, None)
        return removed

    def do_sdiffstore(self, destination: str, *keys: str) -> int:
        first, *rest = [self._get_set(k) for k in keys]
        return self._store_set(destination, first.difference(*rest))

    def do_sunionstore(self, destination: str, *keys: str) -> int:
        return self._store_set(destination, set().union(*[self._get_set(k) for k in keys]))

    def do_set(self, key: str, value: Any) -> bool:
        self.data[key] = str(value)
        self.expiry_ms.pop(key, None)
        return True

    def do_pexpire(self, key: str, ms: Any) -> bool:
        if key not in self.data:
            return False
        self.expiry_ms[key] = int(ms)
        return True

    # -- async client API --------------------------------------------------
    async def sadd(self, key: str, *members: Any) -> int:
        self._check_connection()
        return self.do_sadd(key, *members)

    async def hset(self, key: str, mapping: dict[str, Any] | None = None) -> int:
        self._check_connection()
        current = self.data.setdefault(key, {})
        if not isinstance(current, dict):
            raise ResponseError(WRONGTYPE)
        created = 0
        for field, value in (mapping or {}).items():
            if field not in current:
                created += 1
            current[field] = str(value)
        return created

    async def eval(self, script: str, numkeys: int, *keys_and_args: Any) -> list:
        self._check_connection()
        return self._run_script(script, numkeys, keys_and_args)

    async def evalsha(self, sha: str, numkeys: int, *keys_and_args: Any) -> list:
        self._check_connection()
        if sha not in self.scripts:
            raise NoScriptError("No matching script. Please use EVAL.")
        return self._run_script(self.scripts[sha], numkeys, keys_and_args)

    async def script_load(self, script: str) -> str:
        self._check_connection()
        sha = hashlib.sha1(script.encode()).hexdigest()
        self.scripts[sha] = script
        return sha

    async def smismember(self, key: str, values: list[Any]) -> list[bool]:
        self._check_connection()
        members = self._get_set(key)
        return [str(v) in members for v in values]

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        pipe = FakePipeline(self, transaction=transaction)
        self.pipelines.append(pipe)
        return pipe


class FakePipeline:
    """Double of redis.asyncio.client.Pipeline for MULTI/EXEC batches."""

    def __init__(self, redis: FakeRedis, *, transaction: bool) -> None:
        self.redis = redis
        self.transaction = transaction
        self.command_stack: list[tuple[Any, ...]] = []
        self.executed_stack: list[tuple[Any, ...]] = []
        self.reset_called = False

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.reset_called = True
        self.command_stack = []

    def __len__(self) -> int:
        return len(self.command_stack)

    def execute_command(self, *args: Any) -> "FakePipeline":
        self.command_stack.append(args)
        return self

    async def execute(self, raise_on_error: bool = True) -> list[Any]:
        if self.redis.fail_next_exec:
            self.redis.fail_next_exec = False
            raise ConnectionError("Connection closed by server.")
        self.redis._check_connection()

        self.executed_stack = list(self.command_stack)
        results: list[Any] = []
        for name, *args in self.command_stack:
            handler = getattr(self.redis, f"do_{name.lower()}")
            try:
                results.append(handler(*args))
            except ResponseError as exc:
                if raise_on_error:
                    raise
                results.append(exc)
        return results


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Fresh in-memory client for each test."""
    return FakeRedis()


@pytest.fixture
def adapter(fake_redis: FakeRedis) -> RedisAdapter:
    """Adapter wrapping the in-memory client."""
    return RedisAdapter(fake_redis)  # type: ignore[arg-type]
