"""Pytest fixtures shared across the throttled-fetch test suite."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Callable, Iterable, Mapping

import httpx
import pytest

from throttled_fetch.config import ConfigLocator, ConfigRepository, TransportSettings
from throttled_fetch.engine import HttpTransport
from throttled_fetch.errors import TransportError


class FakeTransport:
    """In-memory transport recording how many reads overlap.

    ``contents`` maps identifiers to bytes; ``delays`` adds a per-identifier
    pause (seconds) while the read is in flight; identifiers in ``failing``
    raise ``TransportError`` after their delay.
    """

    def __init__(
        self,
        contents: Mapping[str, bytes],
        delays: Mapping[str, float] | None = None,
        failing: Iterable[str] = (),
    ) -> None:
        self.contents = dict(contents)
        self.delays = dict(delays or {})
        self.failing = set(failing)
        self.in_flight = 0
        self.high_water_mark = 0
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.closed = False

    def _enter(self, identifier: str) -> None:
        self.calls.append(identifier)
        self.in_flight += 1
        self.high_water_mark = max(self.high_water_mark, self.in_flight)

    def _leave(self, identifier: str) -> bytes:
        self.in_flight -= 1
        self.completed.append(identifier)
        if identifier in self.failing or identifier not in self.contents:
            raise TransportError(identifier, "Fake failure")
        return self.contents[identifier]

    def read_bytes(self, identifier: str) -> bytes:
        self._enter(identifier)
        time.sleep(self.delays.get(identifier, 0.0))
        return self._leave(identifier)

    async def aread_bytes(self, identifier: str) -> bytes:
        self._enter(identifier)
        try:
            await asyncio.sleep(self.delays.get(identifier, 0.0))
        except asyncio.CancelledError:
            self.in_flight -= 1
            raise
        return self._leave(identifier)

    def close(self) -> None:
        self.closed = True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport_factory() -> Callable[..., FakeTransport]:
    return FakeTransport


@pytest.fixture
def abc_transport() -> FakeTransport:
    return FakeTransport(
        {"A": b"a", "B": b"b", "C": b"c"},
        delays={"A": 0.03, "B": 0.01, "C": 0.02},
    )


def _mock_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/hello":
        return httpx.Response(200, content=b"hello")
    if path == "/redirect":
        return httpx.Response(302, headers={"Location": "https://example.test/hello"})
    if path == "/agent":
        return httpx.Response(200, text=request.headers.get("User-Agent", ""))
    if path == "/boom":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404, text="missing")


@pytest.fixture
def http_transport() -> HttpTransport:
    transport = HttpTransport(
        TransportSettings(timeout=5, user_agent="tests/1.0"),
        transport=httpx.MockTransport(_mock_handler),
        async_transport=httpx.MockTransport(_mock_handler),
    )
    yield transport
    transport.close()


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("THROTTLED_FETCH_HOME", str(tmp_path))
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
