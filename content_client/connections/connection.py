"""Connection wiring: targets, monitor, HTTP client and cache.

A :class:`ContentConnection` is created once per process. It owns the
failover monitor, relays its notifications as log events and hands out
:class:`~content_client.content.request.ContentRequest` instances bound to
the monitor's active target.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from content_client.cache.base import CacheMissEvent, CacheProvider
from content_client.connections.monitor import PingEvent, TargetMonitor
from content_client.connections.target import Target
from content_client.content.request import ContentRequest
from content_client.core.config import RequestSettings, Settings
from content_client.core.errors import ConfigurationError, ContentClientError
from content_client.core.hooks import EventHook

logger = logging.getLogger(__name__)


class ConnectionStatus(enum.StrEnum):
    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    INITIALIZED = "initialized"


class LogLevel(enum.StrEnum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    FAILURE = "failure"


_LOGGING_LEVELS = {
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.FAILURE: logging.ERROR,
}


@dataclass
class InitializationResult:
    """Outcome of :meth:`ContentConnection.initialize`."""

    success: bool
    message: str = ""
    exception: Exception | None = None


@dataclass
class LogEvent:
    """A connection notification meant for the host application's log."""

    level: LogLevel
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exception: Exception | None = None


class ContentConnection:
    """Entry point of the client.

    Args:
        primary: Primary target, or its base url.
        secondary: Optional failover target, or its base url.
        settings: Client settings; defaults to an environment-less
            :class:`Settings`.
        client: HTTP client to use. When omitted the connection creates
            and owns one configured from ``settings``.
        cache: Cache provider shared by every request of this connection.

    Raises:
        ConfigurationError: If no primary target is supplied.
    """

    def __init__(
        self,
        primary: Target | str | None,
        secondary: Target | str | None = None,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cache: CacheProvider | None = None,
    ) -> None:
        self.settings = settings or Settings(_env_file=None)
        if primary is None or (isinstance(primary, str) and not primary.strip()):
            raise ConfigurationError("A primary target is required", setting="primary_url")

        self.primary = self._as_target(primary, self.settings.primary_ping_path)
        self.secondary = (
            self._as_target(secondary, self.settings.secondary_ping_path) if secondary else None
        )
        self.cache = cache
        self.status = ConnectionStatus.UNINITIALIZED

        self._owns_client = client is None
        self.client = client or self._build_client(self.settings)
        self.monitor = TargetMonitor(
            self.primary,
            self.secondary,
            client=self.client,
            primary_delay=self.settings.primary_ping_interval_seconds,
            secondary_delay=self.settings.secondary_ping_interval_seconds,
            exception_retry_delay=self.settings.ping_exception_retry_seconds,
        )

        self.on_log: EventHook[LogEvent] = EventHook("connection_log")
        self.on_target_ping: EventHook[PingEvent] = EventHook("target_ping")

    @classmethod
    def from_settings(cls, settings: Settings, cache: CacheProvider | None = None) -> ContentConnection:
        """Create a connection from the ``primary_url``/``secondary_url`` settings."""
        if not settings.primary_url:
            raise ConfigurationError("A primary target is required", setting="primary_url")
        return cls(settings.primary_url, settings.secondary_url, settings, cache=cache)

    @staticmethod
    def _as_target(value: Target | str, ping: str | None) -> Target:
        if isinstance(value, Target):
            return value
        return Target(value, ping)

    @staticmethod
    def _build_client(settings: Settings) -> httpx.AsyncClient:
        headers = {}
        if settings.api_key:
            headers[settings.api_key_header] = settings.api_key
        return httpx.AsyncClient(
            timeout=settings.global_request_timeout_seconds,
            headers=headers,
        )

    @property
    def active_target(self) -> Target:
        return self.monitor.active_target

    def initialize(self) -> InitializationResult:
        """Subscribe to monitor notifications and start health checks.

        Must be called from a running event loop.
        """
        if self.status == ConnectionStatus.PENDING:
            return InitializationResult(False, "Initialization already in progress")
        if self.status == ConnectionStatus.INITIALIZED:
            return InitializationResult(True, "Connection already initialized")

        self.status = ConnectionStatus.PENDING
        try:
            self.monitor.on_ping_success.subscribe(self._handle_ping_success)
            self.monitor.on_ping_failure.subscribe(self._handle_ping_failure)
            self.monitor.on_exception.subscribe(self._handle_monitor_exception)
            if self.cache is not None:
                self.cache.on_cache_miss.subscribe(self._handle_cache_miss)
            self.monitor.start()
        except ContentClientError as exc:
            self.status = ConnectionStatus.UNINITIALIZED
            logger.error("Failed to initialize content connection: %s", exc)
            return InitializationResult(False, str(exc), exc)

        if not self.monitor.running:
            self.status = ConnectionStatus.UNINITIALIZED
            return InitializationResult(False, "Target monitor did not start")

        self.status = ConnectionStatus.INITIALIZED
        logger.info(
            "Content connection initialized (primary=%s, secondary=%s)",
            self.primary.url,
            self.secondary.url if self.secondary else None,
        )
        return InitializationResult(True, "Connection initialized")

    def new_request(self, settings: RequestSettings | None = None) -> ContentRequest:
        """Create a request bound to this connection's monitor and cache."""
        return ContentRequest(
            self.monitor,
            self.cache,
            self.client,
            settings or self.settings.request_settings(),
        )

    async def aclose(self) -> None:
        """Stop health checks and release the HTTP client if owned."""
        self.monitor.stop()
        await self.monitor.wait_stopped()
        if self.cache is not None:
            self.cache.on_cache_miss.unsubscribe(self._handle_cache_miss)
        if self._owns_client:
            await self.client.aclose()
        self.status = ConnectionStatus.UNINITIALIZED

    async def __aenter__(self) -> ContentConnection:
        self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- Notification relays -----------------------------------------------

    def _handle_ping_success(self, event: PingEvent) -> None:
        self.on_target_ping.fire(event)
        self._log(LogLevel.SUCCESS, f"Ping to {event.target.ping} succeeded", {"target": str(event.target.url)})

    def _handle_ping_failure(self, event: PingEvent) -> None:
        self.on_target_ping.fire(event)
        status = event.response.status_code if event.response is not None else None
        self._log(
            LogLevel.WARNING,
            f"Ping to {event.target.ping} failed",
            {"target": str(event.target.url), "status_code": status},
        )

    def _handle_monitor_exception(self, exc: Exception) -> None:
        self._log(LogLevel.FAILURE, f"Target monitor error: {exc}", exception=exc)

    def _handle_cache_miss(self, event: CacheMissEvent) -> None:
        self._log(
            LogLevel.WARNING,
            f"Cache miss for {event.attempted_key}",
            {"key": event.attempted_key, "reason": event.reason},
        )

    def _log(
        self,
        level: LogLevel,
        message: str,
        data: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        logger.log(_LOGGING_LEVELS[level], "%s", message)
        self.on_log.fire(LogEvent(level, message, data or {}, exception))
