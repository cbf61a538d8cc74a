"""Retry policy for outbound content requests.

Wraps a single GET with status-code classification and linear-growth
backoff. The policy never raises for a failed request: callers receive a
:class:`PolicyResult` and decide whether to treat it as missing content.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from content_client.core.config import RequestSettings
from content_client.core.hooks import EventHook

logger = logging.getLogger(__name__)


class OutcomeType(enum.StrEnum):
    """Final outcome of a policy-governed call."""

    SUCCESSFUL = "successful"
    FAILURE = "failure"


@dataclass(frozen=True)
class PolicyResult:
    """What a policy-governed call produced.

    Attributes:
        outcome: SUCCESSFUL when the last response was not retryable.
        result: The response when the outcome is SUCCESSFUL.
        final_handled_result: The last retryable response when retries ran out.
        exception: The transport error when the call raised.
        attempts: Number of calls made, including the first.
    """

    outcome: OutcomeType
    result: httpx.Response | None = None
    final_handled_result: httpx.Response | None = None
    exception: Exception | None = None
    attempts: int = 1

    @property
    def response(self) -> httpx.Response | None:
        """The last response received, whatever the outcome."""
        return self.result if self.result is not None else self.final_handled_result

    @property
    def is_success(self) -> bool:
        """True when the call completed with a 2xx response."""
        return (
            self.outcome is OutcomeType.SUCCESSFUL
            and self.result is not None
            and self.result.is_success
        )


@dataclass(frozen=True)
class RetryEvent:
    """Payload fired before each retry delay."""

    attempt: int
    delay: float
    response: httpx.Response | None = None
    exception: Exception | None = None

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class RetryPolicy:
    """Executes a call, retrying responses whose status is worth retrying."""

    def __init__(
        self,
        settings: RequestSettings | None = None,
        on_retry: EventHook[RetryEvent] | None = None,
    ) -> None:
        self.settings = settings or RequestSettings()
        self.on_retry = on_retry if on_retry is not None else EventHook("request_retry")

    def backoff(self, attempt: int) -> float:
        """Seconds to wait before retry ``attempt`` (1-indexed)."""
        if attempt <= 0:
            return 0.0
        return self.settings.retry_interval_seconds * (self.settings.retry_interval_modifier * attempt)

    def is_retryable(self, response: httpx.Response) -> bool:
        return response.status_code in self.settings.retryable_status_codes

    async def execute(self, call: Callable[[], Awaitable[httpx.Response]]) -> PolicyResult:
        """Run ``call`` until it yields a non-retryable outcome or retries run out.

        Args:
            call: Zero-argument coroutine factory issuing the request.

        Returns:
            The captured outcome. Never raises for HTTP or transport failures.
        """
        max_retries = self.settings.number_of_retries

        for attempt in range(max_retries + 1):
            try:
                response = await call()
            except Exception as exc:
                if self.settings.retry_transport_errors and attempt < max_retries:
                    await self._before_retry(attempt + 1, exception=exc)
                    continue
                logger.warning("Request failed after %d attempt(s): %s", attempt + 1, exc)
                return PolicyResult(OutcomeType.FAILURE, exception=exc, attempts=attempt + 1)

            if not self.is_retryable(response):
                return PolicyResult(OutcomeType.SUCCESSFUL, result=response, attempts=attempt + 1)

            if attempt < max_retries:
                await self._before_retry(attempt + 1, response=response)
                continue

            logger.warning(
                "Request still returned %d after %d retries",
                response.status_code,
                max_retries,
            )
            return PolicyResult(
                OutcomeType.FAILURE,
                final_handled_result=response,
                attempts=attempt + 1,
            )

        # Should not reach here
        raise RuntimeError("Unexpected retry loop exit")

    async def _before_retry(
        self,
        attempt: int,
        *,
        response: httpx.Response | None = None,
        exception: Exception | None = None,
    ) -> None:
        delay = self.backoff(attempt)
        logger.debug(
            "Retrying request in %.2fs (attempt %d/%d): %s",
            delay,
            attempt,
            self.settings.number_of_retries,
            response.status_code if response is not None else exception,
        )
        self.on_retry.fire(RetryEvent(attempt=attempt, delay=delay, response=response, exception=exception))
        if delay > 0:
            await asyncio.sleep(delay)
