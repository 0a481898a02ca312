"""Factory for building command adapters."""

from __future__ import annotations

from urllib.parse import urlsplit

from redis.asyncio import Redis

from ratelimit_redis.adapters.redis.base import AbstractCommandAdapter
from ratelimit_redis.adapters.redis.client import RedisAdapter
from ratelimit_redis.core.config import RedisSettings, settings
from ratelimit_redis.core.errors import ValidationAppError

SUPPORTED_SCHEMES = {"redis", "rediss", "unix"}


def create_redis_adapter(
    client: Redis | None = None,
    *,
    redis_settings: RedisSettings | None = None,
) -> AbstractCommandAdapter:
    """Create a command adapter.

    When a client is given it is wrapped as-is and its lifecycle stays with the
    caller. Otherwise a client is built from settings.redis (REDIS_* variables).

    Args:
        client: Existing redis.asyncio.Redis instance to wrap.
        redis_settings: Overrides settings.redis when building a client.

    Returns:
        AbstractCommandAdapter: Adapter bound to the client.

    Raises:
        ValidationAppError: If the configured URL uses an unsupported scheme.
    """
    if client is not None:
        return RedisAdapter(client)

    cfg = redis_settings or settings.redis
    scheme = urlsplit(cfg.url).scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ValidationAppError(
            code="redis_unsupported_url",
            message=(
                f"Unsupported Redis URL scheme: '{scheme}'. "
                f"Supported schemes: {', '.join(sorted(SUPPORTED_SCHEMES))}"
            ),
        )

    built = Redis.from_url(
        cfg.url,
        decode_responses=cfg.decode_responses,
        socket_timeout=cfg.socket_timeout_seconds,
        client_name=cfg.client_name,
    )
    return RedisAdapter(built)
