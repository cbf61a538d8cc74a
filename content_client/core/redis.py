"""Redis connection management for the shared content cache."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis

from content_client.core.config import Settings
from content_client.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

KEY_PREFIX = "content-client:"


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """Create an async Redis client.

    Args:
        settings: Client settings with the Redis connection URL.

    Returns:
        An async Redis client instance.

    Raises:
        ConfigurationError: If no Redis URL is configured.
    """
    if not settings.redis_url:
        raise ConfigurationError("A Redis URL is required for the Redis cache", setting="redis_url")
    client: aioredis.Redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    return client


async def verify_redis_connectivity(client: aioredis.Redis) -> bool:
    """Check if Redis is reachable.

    Returns:
        True if Redis responds to PING, False otherwise.
    """
    try:
        return bool(await client.ping())
    except Exception:
        logger.exception("Failed to connect to Redis")
        return False
