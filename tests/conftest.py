"""
Shared fixtures for the gateway tests.

Upstream APIs are never contacted: handlers get their httpx clients from a
StubUpstream, which mounts an httpx.MockTransport and records every request
it receives so tests can assert how many outbound calls were made.
"""

from typing import Callable

import httpx
import pytest

from gateway.config import Settings

Route = Callable[[httpx.Request], httpx.Response]


class StubUpstream:
    """Callable transport handler that records requests."""

    def __init__(self, route: Route):
        self.route = route
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.route(request)

    def client_factory(self, settings: Settings) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self), timeout=settings.http_timeout
        )


def _unexpected_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected outbound request: {request.method} {request.url}")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        github_token="test-token",
        openweather_api_key="test-key",
        github_api_base="https://api.github.test",
        weather_api_base="https://weather.test/data/2.5",
    )


@pytest.fixture
def make_upstream() -> Callable[[Route], StubUpstream]:
    def factory(route: Route = _unexpected_request) -> StubUpstream:
        return StubUpstream(route)

    return factory


# -----------------------------------------------------------------------------
# Canned upstream payloads
#
# Exposed as fixtures that return builder functions, so a test asks for the
# payload shapes it needs by name.
# -----------------------------------------------------------------------------
def _github_commit(sha: str, message: str, author: str = "Ada Lovelace") -> dict:
    return {
        "sha": sha,
        "html_url": f"https://github.com/o/r/commit/{sha}",
        "commit": {"message": message, "author": {"name": author}},
    }


def _current_weather_payload(
    city: str,
    temp: float,
    *,
    country: str = "XX",
    feels_like: float | None = None,
    humidity: int = 50,
    wind_speed: float = 5.0,
) -> dict:
    return {
        "name": city,
        "sys": {"country": country},
        "main": {
            "temp": temp,
            "feels_like": temp if feels_like is None else feels_like,
            "humidity": humidity,
        },
        "weather": [{"main": "Clouds", "description": "broken clouds"}],
        "wind": {"speed": wind_speed},
    }


def _forecast_entry(dt_txt: str, temp_min: float, temp_max: float, condition: str = "Rain") -> dict:
    return {
        "dt_txt": dt_txt,
        "main": {"temp_min": temp_min, "temp_max": temp_max},
        "weather": [{"main": condition, "description": f"light {condition.lower()}"}],
    }


@pytest.fixture
def github_commit() -> Callable[..., dict]:
    return _github_commit


@pytest.fixture
def current_weather_payload() -> Callable[..., dict]:
    return _current_weather_payload


@pytest.fixture
def forecast_entry() -> Callable[..., dict]:
    return _forecast_entry
