"""In-process cache provider with sliding and fixed expiry."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from content_client.cache.base import CacheProvider

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    sliding_seconds: float | None = None
    expires_at: float | None = None


class MemoryCacheProvider(CacheProvider):
    """Dictionary-backed cache for a single process.

    Expiry is evaluated lazily on read. Time is measured on the monotonic
    clock; fixed expirations are converted from wall-clock time when added.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    async def try_get(self, key: str) -> tuple[Any, bool]:
        entry = self._entries.get(key)
        if entry is None:
            return self._miss(key, "not found")

        now = time.monotonic()
        if entry.expires_at is not None and now >= entry.expires_at:
            del self._entries[key]
            return self._miss(key, "expired")

        if entry.sliding_seconds is not None:
            entry.expires_at = now + entry.sliding_seconds
        return entry.value, True

    async def add(
        self,
        key: str,
        value: Any,
        *,
        sliding_expiration: timedelta | None = None,
        fixed_expiration: datetime | None = None,
    ) -> None:
        entry = _Entry(value=value)
        now = time.monotonic()
        if sliding_expiration is not None:
            entry.sliding_seconds = sliding_expiration.total_seconds()
            entry.expires_at = now + entry.sliding_seconds
        elif fixed_expiration is not None:
            if fixed_expiration.tzinfo is None:
                fixed_expiration = fixed_expiration.replace(tzinfo=UTC)
            remaining = (fixed_expiration - datetime.now(UTC)).total_seconds()
            entry.expires_at = now + remaining
        self._entries[key] = entry
        logger.debug("Cached %s", key)

    async def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
