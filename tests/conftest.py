"""Pytest configuration and fixtures for artwork aggregator tests."""

from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
import structlog

_ARTWORK_ENV_VARS = (
    "RPDB_API_KEY",
    "FANART_API_KEY",
    "FANART_ENABLED",
    "TMDB_ACCESS_TOKEN",
    "RPDB_API_KEY_VALIDITY_CACHE_TTL",
    "ARTWORK_LOGO_CACHE_TTL",
    "ARTWORK_CACHE_PATH",
    "ARTWORK_DEBUG",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real keys from a developer shell out of the tests."""
    for name in _ARTWORK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo logging configuration done by CLI commands under test."""
    yield
    structlog.reset_defaults()


class StubTransport:
    """Routes requests by URL path and records every request it sees.

    Unrouted paths answer 404, like the real providers do for unknown ids.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def add(
        self,
        path: str,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
        raises: Exception | None = None,
    ) -> None:
        def _respond(request: httpx.Request) -> httpx.Response:
            if raises is not None:
                raise raises
            if content is not None:
                return httpx.Response(status, content=content)
            return httpx.Response(status, json=json)

        self._routes[path] = _respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"status": "error"})
        return handler(request)

    def calls(self, path: str | None = None) -> int:
        if path is None:
            return len(self.requests)
        return sum(1 for request in self.requests if request.url.path == path)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def stub_transport() -> StubTransport:
    """Fresh request stub for a single test."""
    return StubTransport()
