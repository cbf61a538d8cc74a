"""Endpoint failover monitor.

Runs one health-check loop per configured target and selects the target
requests should use:

- Lifecycle: start → probe loop per target → stop
- Probe outcome: 200 marks the target alive, anything else marks it dead
- Malformed ping addresses are reported as exceptions and retried after
  a short recovery delay; other transport failures count as failed pings
- Notifications fire only after the target's alive flag is updated
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass

import httpx

from content_client.connections.target import Target
from content_client.core.errors import InvalidInputError
from content_client.core.hooks import EventHook

logger = logging.getLogger(__name__)

PRIMARY_PING_DELAY = 10.0
SECONDARY_PING_DELAY = 20.0
PING_EXCEPTION_RETRY_DELAY = 5.0

# Errors that mean the probe itself is misconfigured rather than the
# endpoint being down.
MALFORMED_PING_ERRORS: tuple[type[Exception], ...] = (
    httpx.InvalidURL,
    httpx.UnsupportedProtocol,
    ValueError,
    TypeError,
)


@dataclass(frozen=True)
class PingEvent:
    """Outcome of one health-check attempt against a target."""

    target: Target
    response: httpx.Response | None


class TargetMonitor:
    """Health-checks a primary and an optional secondary target."""

    def __init__(
        self,
        primary: Target,
        secondary: Target | None = None,
        *,
        client: httpx.AsyncClient,
        primary_delay: float = PRIMARY_PING_DELAY,
        secondary_delay: float = SECONDARY_PING_DELAY,
        exception_retry_delay: float = PING_EXCEPTION_RETRY_DELAY,
    ) -> None:
        if primary is None:
            raise InvalidInputError("You need to supply at least a primary target")
        if client is None:
            raise InvalidInputError("A monitor requires an http client")

        self.primary = primary
        self.secondary = secondary
        self._client = client
        self._primary_delay = primary_delay
        self._secondary_delay = secondary_delay
        self._exception_retry_delay = exception_retry_delay
        self._tasks: list[asyncio.Task[None]] = []
        self._stopped = False

        self.on_ping_success: EventHook[PingEvent] = EventHook("ping_success")
        self.on_ping_failure: EventHook[PingEvent] = EventHook("ping_failure")
        self.on_exception: EventHook[Exception] = EventHook("monitor_exception")

    @property
    def active_target(self) -> Target:
        """The target requests should be sent to right now."""
        if self.secondary is None:
            return self.primary
        if not self.primary.alive and not self.secondary.alive:
            return self.primary
        return self.primary if self.primary.alive else self.secondary

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        """Begin probing every configured target without blocking.

        Never raises: a failure to schedule the loops is delivered through
        ``on_exception``.
        """
        if self._stopped or self._tasks:
            return
        try:
            loop = asyncio.get_running_loop()
            self._tasks.append(
                loop.create_task(
                    self._probe_loop(self.primary, self._primary_delay),
                    name="ping-primary",
                )
            )
            if self.secondary is not None:
                self._tasks.append(
                    loop.create_task(
                        self._probe_loop(self.secondary, self._secondary_delay),
                        name="ping-secondary",
                    )
                )
        except Exception as exc:
            logger.warning("Failed to start target monitor: %s", exc)
            self._notify_exception(exc)

    def stop(self) -> None:
        """Cancel every probe loop. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        for task in self._tasks:
            if not task.done():
                task.cancel()
        self.on_ping_success.clear()
        self.on_ping_failure.clear()
        self.on_exception.clear()

    async def wait_stopped(self) -> None:
        """Wait for cancelled probe loops to unwind."""
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _probe_loop(self, target: Target, delay: float) -> None:
        logger.debug("Probing %s every %.1fs", target.ping, delay)
        while not self._stopped:
            try:
                response = await self._client.get(target.ping)
                if response.status_code == httpx.codes.OK:
                    target.set_alive(True)
                    self._notify(self.on_ping_success, PingEvent(target, response))
                else:
                    target.set_alive(False)
                    self._notify(self.on_ping_failure, PingEvent(target, response))
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                break
            except MALFORMED_PING_ERRORS as exc:
                self._notify_exception(exc)
                await asyncio.sleep(self._exception_retry_delay)
            except Exception as exc:
                logger.debug("Ping to %s raised %s", target.ping, exc)
                target.set_alive(False)
                self._notify(self.on_ping_failure, PingEvent(target, None))
                await asyncio.sleep(self._exception_retry_delay)

    def _notify(self, hook: EventHook[PingEvent], event: PingEvent) -> None:
        if not self._stopped:
            hook.fire(event)

    def _notify_exception(self, exc: Exception) -> None:
        if not self._stopped:
            self.on_exception.fire(exc)
