"""Redis command adapter layer - one command vocabulary over any client."""

from ratelimit_redis.adapters.redis.base import AbstractCommandAdapter, AbstractPipeline, IsDenied
from ratelimit_redis.adapters.redis.client import RedisAdapter
from ratelimit_redis.adapters.redis.factory import create_redis_adapter
from ratelimit_redis.adapters.redis.pipeline import RedisPipeline

__all__ = [
    "AbstractCommandAdapter",
    "AbstractPipeline",
    "IsDenied",
    "RedisAdapter",
    "RedisPipeline",
    "create_redis_adapter",
]
