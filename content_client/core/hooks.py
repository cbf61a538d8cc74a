"""Callback registration for monitor, retry and connection notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventHook(Generic[T]):
    """An ordered set of handlers invoked with a single payload.

    A handler that raises is logged and skipped so one misbehaving
    observer cannot break the component that fires the hook.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._handlers: list[Callable[[T], None]] = []

    def subscribe(self, handler: Callable[[T], None]) -> None:
        """Register a handler. Subscribing the same handler twice is a no-op."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[[T], None]) -> None:
        """Remove a handler if present."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def clear(self) -> None:
        self._handlers.clear()

    @property
    def handlers(self) -> list[Callable[[T], None]]:
        return list(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def fire(self, payload: T) -> None:
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler %r for %s failed", handler, self.name or "event")
