from dataclasses import replace

import httpx
import pytest

from gateway.config import Settings
from gateway.dispatcher import Dispatcher
from gateway.weather import (
    CurrentWeather,
    build_weather_gateway,
    parse_current_weather,
    parse_forecast,
    render_comparison,
)


def _dispatcher(upstream, settings: Settings) -> Dispatcher:
    return Dispatcher(build_weather_gateway(upstream.client_factory, lambda: settings))


@pytest.fixture
def cities(current_weather_payload):
    """Route /weather?q=<city> to a payload with that city's temperature."""

    def for_temperatures(temps: dict[str, float]):
        def route(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/weather")
            city = request.url.params["q"]
            if city not in temps:
                return httpx.Response(404, json={"cod": "404", "message": "city not found"})
            return httpx.Response(200, json=current_weather_payload(city, temps[city]))

        return route

    return for_temperatures


def test_catalog_order(make_upstream, settings):
    names = [d.name for d in _dispatcher(make_upstream(), settings).list_tools()]
    assert names == ["get_current_weather", "get_weather_forecast", "compare_weather"]


# -----------------------------------------------------------------------------
# Missing API key
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, arguments",
    [
        ("get_current_weather", {"city": "Paris"}),
        ("get_weather_forecast", {"city": "Paris", "days": 2}),
        ("compare_weather", {"city1": "A", "city2": "B"}),
    ],
)
async def test_missing_api_key_explains_how_to_get_one(make_upstream, settings, tool, arguments):
    upstream = make_upstream()
    dispatcher = _dispatcher(upstream, replace(settings, openweather_api_key=""))

    env = await dispatcher.call_tool(tool, arguments)

    assert env.is_error is True
    assert "OPENWEATHER_API_KEY" in env.text
    assert "https://openweathermap.org/api" in env.text
    assert upstream.requests == []


# -----------------------------------------------------------------------------
# get_current_weather
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_current_weather_report(make_upstream, settings, current_weather_payload):
    payload = current_weather_payload(
        "Paris", 18.5, country="FR", feels_like=17.4, humidity=72, wind_speed=4.2
    )
    upstream = make_upstream(lambda request: httpx.Response(200, json=payload))

    env = await _dispatcher(upstream, settings).call_tool("get_current_weather", {"city": "Paris"})

    assert env.is_error is False
    assert env.text.splitlines() == [
        "Current Weather in Paris, FR:",
        "━" * 31,
        "🌡️  Temperature: 19°C (feels like 17°C)",
        "☁️  Condition: Clouds - broken clouds",
        "💧 Humidity: 72%",
        "💨 Wind Speed: 15 km/h",
    ]
    [request] = upstream.requests
    assert request.url.path == "/data/2.5/weather"
    assert dict(request.url.params) == {"q": "Paris", "appid": "test-key", "units": "metric"}


@pytest.mark.asyncio
async def test_upstream_error_status_is_reported(make_upstream, settings, cities):
    upstream = make_upstream(cities({}))
    env = await _dispatcher(upstream, settings).call_tool("get_current_weather", {"city": "Atlantis"})
    assert env.is_error is True
    assert env.text == "Error: Weather API error: 404 Not Found"


@pytest.mark.asyncio
async def test_malformed_payload_is_reported(make_upstream, settings):
    upstream = make_upstream(lambda request: httpx.Response(200, json={"name": "Paris"}))
    env = await _dispatcher(upstream, settings).call_tool("get_current_weather", {"city": "Paris"})
    assert env.is_error is True
    assert env.text.startswith("Error: Unexpected response from Weather API")


@pytest.mark.asyncio
async def test_wrong_type_is_rejected_before_any_request(make_upstream, settings):
    upstream = make_upstream()
    env = await _dispatcher(upstream, settings).call_tool("get_current_weather", {"city": 75001})
    assert env.is_error is True
    assert env.text == "invalid field city: expected string"
    assert upstream.requests == []


# -----------------------------------------------------------------------------
# get_weather_forecast
# -----------------------------------------------------------------------------
@pytest.fixture
def oslo_forecast(forecast_entry) -> dict:
    return {
        "city": {"name": "Oslo", "country": "NO"},
        "list": [
            forecast_entry("2025-07-10 12:00:00", 14.4, 16.6, "Rain"),
            forecast_entry("2025-07-10 15:00:00", 10.0, 30.0, "Clear"),
            forecast_entry("2025-07-11 00:00:00", 9.5, 12.5, "Clouds"),
            forecast_entry("2025-07-12 00:00:00", 8.0, 11.0, "Clear"),
        ],
    }


@pytest.mark.asyncio
async def test_forecast_summarises_first_entry_of_each_day(make_upstream, settings, oslo_forecast):
    upstream = make_upstream(lambda request: httpx.Response(200, json=oslo_forecast))

    env = await _dispatcher(upstream, settings).call_tool(
        "get_weather_forecast", {"city": "Oslo", "days": 2}
    )

    assert env.is_error is False
    assert env.text == (
        "2-Day Weather Forecast for Oslo, NO:\n"
        + "━" * 31 + "\n\n"
        "Day 1 (2025-07-10):\n"
        "  🌡️  14°C - 17°C\n"
        "  ☁️  Rain - light rain\n\n"
        "Day 2 (2025-07-11):\n"
        "  🌡️  10°C - 13°C\n"
        "  ☁️  Clouds - light clouds\n\n"
    )
    [request] = upstream.requests
    assert request.url.path == "/data/2.5/forecast"
    assert request.url.params["cnt"] == "16"


@pytest.mark.asyncio
async def test_forecast_defaults_to_three_days(make_upstream, settings, oslo_forecast):
    upstream = make_upstream(lambda request: httpx.Response(200, json=oslo_forecast))
    env = await _dispatcher(upstream, settings).call_tool("get_weather_forecast", {"city": "Oslo"})

    assert env.text.startswith("3-Day Weather Forecast for Oslo, NO:")
    assert "Day 3 (2025-07-12)" in env.text
    assert upstream.requests[0].url.params["cnt"] == "24"


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [0, 6, 2.5, -1])
async def test_out_of_range_days_are_rejected(make_upstream, settings, days):
    upstream = make_upstream()
    env = await _dispatcher(upstream, settings).call_tool(
        "get_weather_forecast", {"city": "Oslo", "days": days}
    )
    assert env.is_error is True
    assert env.text.startswith("invalid field days")
    assert upstream.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [10**400, -(10**400), float("inf"), float("nan")])
async def test_days_beyond_float_range_are_rejected(make_upstream, settings, days):
    upstream = make_upstream()
    env = await _dispatcher(upstream, settings).call_tool(
        "get_weather_forecast", {"city": "Oslo", "days": days}
    )
    assert env.is_error is True
    assert env.text.startswith("invalid field days")
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_whole_float_days_are_accepted(make_upstream, settings, oslo_forecast):
    upstream = make_upstream(lambda request: httpx.Response(200, json=oslo_forecast))
    env = await _dispatcher(upstream, settings).call_tool(
        "get_weather_forecast", {"city": "Oslo", "days": 2.0}
    )
    assert env.text.startswith("2-Day Weather Forecast for Oslo, NO:")
    assert upstream.requests[0].url.params["cnt"] == "16"


@pytest.mark.asyncio
async def test_forecast_error_status_is_reported(make_upstream, settings):
    upstream = make_upstream(lambda request: httpx.Response(401, json={"message": "bad key"}))
    env = await _dispatcher(upstream, settings).call_tool("get_weather_forecast", {"city": "Oslo"})
    assert env.is_error is True
    assert env.text == "Error: Forecast API error: 401 Unauthorized"


def test_parse_forecast_limits_days(oslo_forecast):
    forecast = parse_forecast(oslo_forecast, 1)
    assert [d.date for d in forecast.days] == ["2025-07-10"]
    assert forecast.days[0].temp_max == 16.6


# -----------------------------------------------------------------------------
# compare_weather
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_compare_identifies_the_warmer_city(make_upstream, settings, cities):
    upstream = make_upstream(cities({"A": 10, "B": 15}))

    env = await _dispatcher(upstream, settings).call_tool(
        "compare_weather", {"city1": "A", "city2": "B"}
    )

    assert env.is_error is False
    assert env.text.endswith("📊 Comparison:\n  B is 5°C warmer")
    assert env.text.index("A, XX:") < env.text.index("B, XX:")
    assert sorted(r.url.params["q"] for r in upstream.requests) == ["A", "B"]


@pytest.mark.asyncio
async def test_compare_keeps_argument_order_when_first_is_warmer(make_upstream, settings, cities):
    upstream = make_upstream(cities({"Cairo": 35, "Oslo": 12}))
    env = await _dispatcher(upstream, settings).call_tool(
        "compare_weather", {"city1": "Cairo", "city2": "Oslo"}
    )
    assert env.text.startswith("Weather Comparison:")
    assert env.text.index("Cairo, XX:") < env.text.index("Oslo, XX:")
    assert env.text.endswith("Cairo is 23°C warmer")


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [
    {"city1": "Atlantis", "city2": "B"},
    {"city1": "A", "city2": "Atlantis"},
])
async def test_compare_fails_if_either_side_fails(make_upstream, settings, cities, arguments):
    upstream = make_upstream(cities({"A": 10, "B": 15}))
    env = await _dispatcher(upstream, settings).call_tool("compare_weather", arguments)

    assert env.is_error is True
    assert env.text == "Error: Weather API error: 404 Not Found"
    assert len(upstream.requests) == 2


@pytest.mark.asyncio
async def test_compare_missing_city_makes_no_request(make_upstream, settings):
    upstream = make_upstream()
    env = await _dispatcher(upstream, settings).call_tool("compare_weather", {"city1": "A"})
    assert env.is_error is True
    assert env.text == "missing field city2"
    assert upstream.requests == []


def _weather(city: str, temperature: int) -> CurrentWeather:
    return CurrentWeather(temperature, temperature, "Clear", "clear sky", 40, 10, city, "XX")


def test_comparison_reports_a_tie():
    text = render_comparison(_weather("A", 20), _weather("B", 20))
    assert text.endswith("A and B have the same temperature")


def test_temperatures_round_half_up(current_weather_payload):
    weather = parse_current_weather(current_weather_payload("X", 2.5, feels_like=-0.5, wind_speed=2.5))
    assert weather.temperature == 3
    assert weather.feels_like == 0
    assert weather.wind_speed == 9
