"""Shared test fixtures for the content client test suite.

Provides test settings, an in-memory cache and a fake content service
served through ``httpx.MockTransport`` so no test touches the network.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from content_client.cache.memory import MemoryCacheProvider
from content_client.connections.monitor import TargetMonitor
from content_client.connections.target import Target
from content_client.core.config import RequestSettings, Settings

PRIMARY_URL = "https://primary.example.com/api/"
SECONDARY_URL = "https://secondary.example.com/api/"

RouteResult = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class FakeContentService:
    """Routes requests by host and path to canned responses.

    Each route holds a queue of results; the last one repeats once the
    queue is drained. Unrouted paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str | None, str], list[RouteResult]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, *results: RouteResult, host: str | None = None) -> None:
        self.routes[(host, path.lstrip("/"))] = list(results)

    def add_json(self, path: str, payload: Any, status_code: int = 200, host: str | None = None) -> None:
        self.add(path, httpx.Response(status_code, json=payload), host=host)

    def calls_to(self, path: str, host: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if self._relative(request) == path.lstrip("/") and host in (None, request.url.host)
        )

    @staticmethod
    def _relative(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api/")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        relative = self._relative(request)
        queue = self.routes.get((request.url.host, relative)) or self.routes.get((None, relative))
        if not queue:
            return httpx.Response(404, request=request)

        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(request)
        # Fresh copy so a repeated route never hands out a consumed response.
        return httpx.Response(result.status_code, headers=result.headers, content=result.content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings that don't read the environment or a .env file."""
    return Settings(
        _env_file=None,
        primary_url=PRIMARY_URL,
        secondary_url=SECONDARY_URL,
        api_key="test-key",
        primary_ping_interval_seconds=0.01,
        secondary_ping_interval_seconds=0.01,
        ping_exception_retry_seconds=0.01,
        request_retry_interval_seconds=0.0,
    )


@pytest.fixture
def fast_request_settings() -> RequestSettings:
    """Request settings with no backoff delay."""
    return RequestSettings(retry_interval_seconds=0.0)


@pytest.fixture
def memory_cache() -> MemoryCacheProvider:
    return MemoryCacheProvider()


@pytest.fixture
def service() -> FakeContentService:
    return FakeContentService()


@pytest.fixture
def service_client(service: FakeContentService) -> httpx.AsyncClient:
    """Client whose transport is the fake service; holds no sockets."""
    return service.client()


@pytest.fixture
def primary_target() -> Target:
    return Target(PRIMARY_URL)


@pytest.fixture
def monitor(primary_target: Target, service_client: httpx.AsyncClient) -> TargetMonitor:
    """A monitor that is never started; its primary is the active target."""
    return TargetMonitor(primary_target, client=service_client)
