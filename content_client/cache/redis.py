"""Redis-backed cache provider shared between processes.

Values are stored as JSON envelopes. Pydantic models are tagged with their
import path so they decode back to the same type; lists and dicts are
walked recursively.
"""

from __future__ import annotations

import importlib
import json
import logging
import math
from datetime import UTC, datetime, timedelta
from typing import Any

import redis.asyncio as aioredis
from pydantic import BaseModel

from content_client.cache.base import CacheProvider
from content_client.core.redis import KEY_PREFIX

logger = logging.getLogger(__name__)

_MODEL_TAG = "__model__"
_LIST_TAG = "__list__"


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        cls = type(value)
        return {
            _MODEL_TAG: f"{cls.__module__}:{cls.__qualname__}",
            "data": value.model_dump(mode="json"),
        }
    if isinstance(value, (list, tuple)):
        return {_LIST_TAG: [_to_jsonable(item) for item in value]}
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value


def _load_model(path: str) -> type[BaseModel]:
    module_name, _, qualname = path.partition(":")
    obj: Any = importlib.import_module(module_name)
    for attr in qualname.split("."):
        obj = getattr(obj, attr)
    if not (isinstance(obj, type) and issubclass(obj, BaseModel)):
        raise TypeError(f"{path} is not a pydantic model")
    return obj


def _from_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        if _MODEL_TAG in value:
            return _load_model(value[_MODEL_TAG]).model_validate(value["data"])
        if _LIST_TAG in value:
            return [_from_jsonable(item) for item in value[_LIST_TAG]]
        return {k: _from_jsonable(v) for k, v in value.items()}
    return value


def encode_value(value: Any, sliding_seconds: float | None = None) -> str:
    return json.dumps({"value": _to_jsonable(value), "sliding": sliding_seconds})


def decode_value(raw: str) -> tuple[Any, float | None]:
    envelope = json.loads(raw)
    return _from_jsonable(envelope["value"]), envelope.get("sliding")


class RedisCacheProvider(CacheProvider):
    """Cache provider over ``redis.asyncio``.

    Entries that cannot be decoded are reported as misses and dropped.
    """

    def __init__(self, client: aioredis.Redis, prefix: str = KEY_PREFIX) -> None:
        super().__init__()
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def try_get(self, key: str) -> tuple[Any, bool]:
        redis_key = self._key(key)
        raw = await self._client.get(redis_key)
        if raw is None:
            return self._miss(key, "not found")

        try:
            value, sliding = decode_value(raw)
        except (ValueError, TypeError, KeyError, AttributeError, ImportError) as exc:
            logger.warning("Dropping undecodable cache entry %s: %s", redis_key, exc)
            await self._client.delete(redis_key)
            return self._miss(key, "undecodable")

        if sliding:
            await self._client.expire(redis_key, math.ceil(sliding))
        return value, True

    async def add(
        self,
        key: str,
        value: Any,
        *,
        sliding_expiration: timedelta | None = None,
        fixed_expiration: datetime | None = None,
    ) -> None:
        redis_key = self._key(key)
        if sliding_expiration is not None:
            seconds = sliding_expiration.total_seconds()
            await self._client.set(redis_key, encode_value(value, seconds), ex=math.ceil(seconds))
        elif fixed_expiration is not None:
            if fixed_expiration.tzinfo is None:
                fixed_expiration = fixed_expiration.replace(tzinfo=UTC)
            await self._client.set(redis_key, encode_value(value), exat=int(fixed_expiration.timestamp()))
        else:
            await self._client.set(redis_key, encode_value(value))
        logger.debug("Cached %s", redis_key)

    async def remove(self, key: str) -> None:
        await self._client.delete(self._key(key))
