"""Conftest: lightweight stand-ins for aiohttp and the wall clock.

The clients only use a small slice of ``aiohttp.ClientSession`` (``request``,
``get``, ``post`` as async context managers), so a scripted fake is enough to
exercise status handling, envelopes and timeouts without a network.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from edyc_site.storage import MemoryStore


# --------------------------------------------------------------------------- #
#  Fake aiohttp session
# --------------------------------------------------------------------------- #


class FakeResponse:
    """Minimal stand-in for ``aiohttp.ClientResponse``."""

    def __init__(
        self,
        status: int = 200,
        json_data: Any = None,
        *,
        text: str = "",
        headers: dict[str, str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.status = status
        self._json = json_data
        self._text = text
        self.headers = headers or {}
        self.delay = delay

    async def json(self) -> Any:
        if isinstance(self._json, BaseException):
            raise self._json
        return self._json

    async def text(self) -> str:
        return self._text


class _RequestContext:
    def __init__(self, outcome: FakeResponse | BaseException) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        if self._outcome.delay:
            await asyncio.sleep(self._outcome.delay)
        return self._outcome

    async def __aexit__(self, *_: Any) -> None:
        return None


@dataclass
class RecordedCall:
    method: str
    url: str
    kwargs: dict[str, Any] = field(default_factory=dict)


class FakeSession:
    """Replays queued responses (or exceptions) in order and records calls."""

    def __init__(self, *outcomes: FakeResponse | BaseException) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[RecordedCall] = []
        self.closed = False

    def queue(self, *outcomes: FakeResponse | BaseException) -> None:
        self._outcomes.extend(outcomes)

    def request(self, method: str, url: str, **kwargs: Any) -> _RequestContext:
        self.calls.append(RecordedCall(method, url, kwargs))
        if not self._outcomes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return _RequestContext(self._outcomes.pop(0))

    def get(self, url: str, **kwargs: Any) -> _RequestContext:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> _RequestContext:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> _RequestContext:
        return self.request("PUT", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


# --------------------------------------------------------------------------- #
#  Clock
# --------------------------------------------------------------------------- #


class FakeClock:
    """Callable returning a settable Unix time in seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, *, hours: float = 0, seconds: float = 0) -> None:
        self.now += hours * 3600 + seconds


# --------------------------------------------------------------------------- #
#  Fixtures
# --------------------------------------------------------------------------- #


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


def openweather_payload(
    *,
    temp: float = 13.6,
    feels_like: float = 12.4,
    speed: float = 6.2,
    deg: float = 230,
    visibility: int = 9500,
    name: str = "Killyleagh",
) -> dict[str, Any]:
    """A trimmed but realistic ``/weather`` response in metric units."""
    return {
        "coord": {"lon": -5.6342, "lat": 54.4692},
        "weather": [
            {"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}
        ],
        "main": {
            "temp": temp,
            "feels_like": feels_like,
            "temp_min": temp - 1,
            "temp_max": temp + 1,
            "pressure": 1009,
            "humidity": 81,
        },
        "visibility": visibility,
        "wind": {"speed": speed, "deg": deg},
        "clouds": {"all": 75},
        "dt": 1_700_000_000,
        "name": name,
        "cod": 200,
    }
