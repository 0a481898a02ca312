"""Tests for the adapter factory and Redis settings."""

from unittest.mock import MagicMock, patch

import pytest

from ratelimit_redis.adapters.redis import RedisAdapter, create_redis_adapter
from ratelimit_redis.core.config import RedisSettings
from ratelimit_redis.core.errors import ValidationAppError


def test_wraps_given_client_without_building_one() -> None:
    client = MagicMock()

    with patch("ratelimit_redis.adapters.redis.factory.Redis.from_url") as from_url:
        adapter = create_redis_adapter(client)

    assert isinstance(adapter, RedisAdapter)
    assert adapter.client is client
    from_url.assert_not_called()


def test_builds_client_from_settings() -> None:
    cfg = RedisSettings(
        url="rediss://cache.internal:6380/2",
        decode_responses=True,
        socket_timeout_seconds=1.5,
        client_name="limiter",
    )

    with patch("ratelimit_redis.adapters.redis.factory.Redis.from_url") as from_url:
        adapter = create_redis_adapter(redis_settings=cfg)

    from_url.assert_called_once_with(
        "rediss://cache.internal:6380/2",
        decode_responses=True,
        socket_timeout=1.5,
        client_name="limiter",
    )
    assert adapter.client is from_url.return_value


def test_rejects_unsupported_scheme() -> None:
    cfg = RedisSettings(url="http://localhost:6379")

    with pytest.raises(ValidationAppError) as exc_info:
        create_redis_adapter(redis_settings=cfg)

    assert exc_info.value.code == "redis_unsupported_url"


def test_redis_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://env-host:6379/3")
    monkeypatch.setenv("REDIS_DECODE_RESPONSES", "false")

    cfg = RedisSettings()

    assert cfg.url == "redis://env-host:6379/3"
    assert cfg.decode_responses is False
    assert cfg.socket_timeout_seconds == 5.0
