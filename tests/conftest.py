"""Shared fixtures for cdnhit tests."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import httpx
import pytest

from cdnhit.models import Destination, ProbeConfig


class FakeClock:
    """Clock returning start/stop pairs that are *elapsed_ms* apart."""

    def __init__(self, elapsed_ms: Sequence[float]):
        self._elapsed = list(elapsed_ms)
        self._now = 100.0
        self._running = False
        self._index = 0

    def __call__(self) -> float:
        if self._running:
            self._now += self._elapsed[self._index] / 1000.0
            self._index += 1
        self._running = not self._running
        return self._now


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def sequence_transport(responses: Sequence[Callable[[httpx.Request], httpx.Response]]):
    """MockTransport answering the n-th request with the n-th responder."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        responder = responses[len(requests)]
        requests.append(request)
        return responder(request)

    transport = httpx.MockTransport(handler)
    transport.requests = requests  # type: ignore[attr-defined]
    return transport


def respond(status: int = 200, headers: Optional[dict] = None):
    """Responder returning a fixed status and headers."""
    return lambda request: httpx.Response(status, headers=headers or {})


def hit(status: int = 200):
    return respond(status, {"x-cache": "Hit from cloudfront"})


def miss(status: int = 200):
    return respond(status, {"x-cache": "Miss from cloudfront"})


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def destination() -> Destination:
    return Destination(
        name="assets",
        url="https://assets.example.com/logo.png",
        cache_header_key="x-cache",
        cache_expected_hit_value="Hit from cloudfront",
    )


@pytest.fixture
def other_destination() -> Destination:
    return Destination(
        name="docs",
        url="https://docs.example.com/",
        cache_header_key="x-cache",
        cache_expected_hit_value="Hit from cloudfront",
    )


@pytest.fixture
def config() -> ProbeConfig:
    return ProbeConfig(requests=5, delay_ms=50)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
