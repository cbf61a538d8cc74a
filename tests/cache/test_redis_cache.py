"""Tests for the Redis cache provider."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from content_client.cache.base import CustomQueryCacheValue
from content_client.cache.redis import RedisCacheProvider, decode_value, encode_value
from content_client.content.models import DescendantIdsResponse, RawContentResponse


def _mock_redis(stored: str | None = None) -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=stored)
    client.set = AsyncMock()
    client.delete = AsyncMock()
    client.expire = AsyncMock()
    return client


class TestEncoding:
    """JSON envelope encoding of cached values."""

    def test_plain_values(self) -> None:
        """Should round-trip plain JSON values."""
        assert decode_value(encode_value("42")) == ("42", None)
        assert decode_value(encode_value({"a": [1, 2]}, 30.0)) == ({"a": [1, 2]}, 30.0)

    def test_content_model_keeps_type(self) -> None:
        """Should decode a cached content model as the same type."""
        content = RawContentResponse(
            id=5,
            name="About",
            rendered_content="&lt;p&gt;Hi&lt;/p&gt;",
            meta_tag_collection=[("title", "About")],
            update_date=datetime(2024, 3, 1, 12, 0),
        )

        value, _ = decode_value(encode_value(content))

        assert isinstance(value, RawContentResponse)
        assert value == content

    def test_list_of_models(self) -> None:
        """Should round-trip a list of models."""
        entries = [CustomQueryCacheValue(custom_query_key="q1", content_id="5")]

        value, _ = decode_value(encode_value(entries))

        assert value == entries

    def test_id_list_model(self) -> None:
        """Should round-trip an id list model."""
        ids = DescendantIdsResponse(origin=1, descendants=[2, 3])
        assert decode_value(encode_value(ids))[0] == ids


class TestRedisCacheProvider:
    """Operations against a mocked redis.asyncio client."""

    @pytest.mark.asyncio
    async def test_add_without_expiry(self) -> None:
        """Should store a value without a TTL."""
        client = _mock_redis()
        cache = RedisCacheProvider(client)

        await cache.add("42", "value")

        client.set.assert_awaited_once()
        key, raw = client.set.await_args.args
        assert key == "content-client:42"
        assert json.loads(raw) == {"value": "value", "sliding": None}

    @pytest.mark.asyncio
    async def test_add_with_sliding_expiry(self) -> None:
        """Should set a TTL rounded up from the sliding expiry."""
        client = _mock_redis()
        cache = RedisCacheProvider(client, prefix="test:")

        await cache.add("42", "value", sliding_expiration=timedelta(seconds=90.5))

        assert client.set.await_args.args[0] == "test:42"
        assert client.set.await_args.kwargs == {"ex": 91}

    @pytest.mark.asyncio
    async def test_add_with_fixed_expiry(self) -> None:
        """Should set an absolute expiry timestamp."""
        client = _mock_redis()
        cache = RedisCacheProvider(client)
        at = datetime(2030, 1, 1, tzinfo=UTC)

        await cache.add("42", "value", fixed_expiration=at)

        assert client.set.await_args.kwargs == {"exat": int(at.timestamp())}

    @pytest.mark.asyncio
    async def test_hit(self) -> None:
        """Should return a decoded hit without touching the TTL."""
        client = _mock_redis(encode_value("cached"))
        cache = RedisCacheProvider(client)

        assert await cache.try_get("42") == ("cached", True)
        client.get.assert_awaited_once_with("content-client:42")
        client.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sliding_hit_refreshes_ttl(self) -> None:
        """Should refresh the TTL of a sliding entry on read."""
        client = _mock_redis(encode_value("cached", 60.0))
        cache = RedisCacheProvider(client)

        await cache.try_get("42")

        client.expire.assert_awaited_once_with("content-client:42", 60)

    @pytest.mark.asyncio
    async def test_miss_fires_hook(self) -> None:
        """Should report a missing key as a miss."""
        cache = RedisCacheProvider(_mock_redis(None))
        misses = []
        cache.on_cache_miss.subscribe(misses.append)

        assert await cache.try_get("nope") == (None, False)
        assert misses[0].attempted_key == "nope"

    @pytest.mark.asyncio
    async def test_undecodable_entry_dropped(self) -> None:
        """Should delete an entry that cannot be decoded."""
        client = _mock_redis("not json")
        cache = RedisCacheProvider(client)
        misses = []
        cache.on_cache_miss.subscribe(misses.append)

        assert await cache.try_get("42") == (None, False)
        client.delete.assert_awaited_once_with("content-client:42")
        assert misses[0].reason == "undecodable"

    @pytest.mark.asyncio
    async def test_remove(self) -> None:
        """Should delete the prefixed key."""
        client = _mock_redis()
        await RedisCacheProvider(client).remove("42")
        client.delete.assert_awaited_once_with("content-client:42")
