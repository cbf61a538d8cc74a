"""Cache contract, key space and the bundled providers."""

from content_client.cache.base import (
    CUSTOM_QUERY_CACHE_KEY,
    CacheMissEvent,
    CacheProvider,
    CustomQueryCacheValue,
    content_key,
    descendants_key,
    picker_key,
    url_key,
)
from content_client.cache.memory import MemoryCacheProvider
from content_client.cache.redis import RedisCacheProvider

__all__ = [
    "CUSTOM_QUERY_CACHE_KEY",
    "CacheMissEvent",
    "CacheProvider",
    "CustomQueryCacheValue",
    "MemoryCacheProvider",
    "RedisCacheProvider",
    "content_key",
    "descendants_key",
    "picker_key",
    "url_key",
]
