"""Tests for Redis client creation and connectivity checks."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from content_client.core.config import Settings
from content_client.core.errors import ConfigurationError
from content_client.core.redis import create_redis_client, verify_redis_connectivity


class TestCreateRedisClient:
    """Tests for create_redis_client."""

    def test_requires_redis_url(self) -> None:
        """Should raise when no Redis URL is configured."""
        with pytest.raises(ConfigurationError, match="redis_url") as exc_info:
            create_redis_client(Settings(_env_file=None))
        assert exc_info.value.setting == "redis_url"

    def test_creates_decoding_client(self) -> None:
        """Should create a client that decodes responses."""
        settings = Settings(_env_file=None, redis_url="redis://localhost:6379/2")
        with patch("content_client.core.redis.aioredis.from_url") as from_url:
            client = create_redis_client(settings)
        from_url.assert_called_once_with("redis://localhost:6379/2", decode_responses=True)
        assert client is from_url.return_value


class TestVerifyRedisConnectivity:
    """Tests for verify_redis_connectivity."""

    @pytest.mark.asyncio
    async def test_reachable(self) -> None:
        """Should return True when Redis answers PING."""
        client = MagicMock()
        client.ping = AsyncMock(return_value=True)
        assert await verify_redis_connectivity(client) is True

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        """Should return False when Redis is unreachable."""
        client = MagicMock()
        client.ping = AsyncMock(side_effect=ConnectionError("refused"))
        assert await verify_redis_connectivity(client) is False
