"""Cache provider contract and the key space used by content requests."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel

from content_client.core.hooks import EventHook

CUSTOM_QUERY_CACHE_KEY = "CustomQueriesIndex"

_CONTENT_KEY = "{0}"
_DESCENDANTS_KEY = "{0}_descendants"
_PICKER_KEY = "{0}_{1}_picker"
_URL_KEY = "url:{0}"


def content_key(content_id: int | str) -> str:
    return _CONTENT_KEY.format(content_id)


def descendants_key(content_id: int | str) -> str:
    return _DESCENDANTS_KEY.format(content_id)


def picker_key(content_id: int | str, property_alias: str) -> str:
    return _PICKER_KEY.format(content_id, property_alias)


def url_key(prepared_url: str) -> str:
    """Key of the url → content id indirection entry."""
    return _URL_KEY.format(prepared_url)


class CustomQueryCacheValue(BaseModel):
    """One entry of the index of cached custom queries."""

    custom_query_key: str
    content_id: str


@dataclass(frozen=True)
class CacheMissEvent:
    """Fired when a lookup finds nothing under ``attempted_key``."""

    attempted_key: str
    reason: str = ""


class CacheProvider(abc.ABC):
    """Storage consumed by content requests.

    Subclasses must implement:
    - try_get(): look a key up, reporting whether it was found.
    - add(): store a value, optionally with a sliding or fixed expiry.
    - remove(): drop a key.

    Implementations should fire ``on_cache_miss`` whenever ``try_get``
    reports a miss.
    """

    def __init__(self) -> None:
        self.on_cache_miss: EventHook[CacheMissEvent] = EventHook("cache_miss")

    @abc.abstractmethod
    async def try_get(self, key: str) -> tuple[Any, bool]:
        """Look up a key.

        Returns:
            ``(value, True)`` on a hit, ``(None, False)`` on a miss.
        """
        ...

    @abc.abstractmethod
    async def add(
        self,
        key: str,
        value: Any,
        *,
        sliding_expiration: timedelta | None = None,
        fixed_expiration: datetime | None = None,
    ) -> None:
        """Store a value, replacing any existing entry under the key.

        Args:
            key: Cache key.
            value: Value to store.
            sliding_expiration: Evict after this long without a read.
            fixed_expiration: Evict at this moment regardless of reads.
        """
        ...

    @abc.abstractmethod
    async def remove(self, key: str) -> None:
        """Drop a key. Removing a missing key is not an error."""
        ...

    def _miss(self, key: str, reason: str) -> tuple[Any, bool]:
        self.on_cache_miss.fire(CacheMissEvent(attempted_key=key, reason=reason))
        return None, False
