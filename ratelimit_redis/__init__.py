"""Atomic Redis command adapter for rate limiting engines."""

from ratelimit_redis.adapters.redis import (
    AbstractCommandAdapter,
    AbstractPipeline,
    RedisAdapter,
    RedisPipeline,
    create_redis_adapter,
)
from ratelimit_redis.core.errors import (
    AdapterError,
    CommandError,
    NoScriptError,
    PipelineReusedError,
    ScriptError,
)

__version__ = "0.1.0"

__all__ = [
    "AbstractCommandAdapter",
    "AbstractPipeline",
    "AdapterError",
    "CommandError",
    "NoScriptError",
    "PipelineReusedError",
    "RedisAdapter",
    "RedisPipeline",
    "ScriptError",
    "create_redis_adapter",
]
