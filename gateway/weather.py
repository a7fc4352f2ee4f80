# =============================================================================
# gateway/weather.py  -  OpenWeatherMap Tools
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Fetches current conditions and short forecasts from OpenWeatherMap and
#   formats them as display text.  Three tools:
#
#     get_current_weather   city                -> one report
#     get_weather_forecast  city, days (1-5)    -> one block per day
#     compare_weather       city1, city2        -> both reports + which is warmer
#
# FETCH vs RENDER:
#   - fetch_* calls the API and maps the JSON into CurrentWeather / Forecast
#     (raising UpstreamError on any failure)
#   - render_* turns those dataclasses into text, with no I/O
#   The handler methods on WeatherTools glue the two together and convert
#   UpstreamError into Err.
#
# UNITS:
#   Requests use units=metric.  Temperatures are rounded half-up to whole
#   degrees Celsius; wind speed arrives in m/s and is shown in km/h.
#
# API KEY:
#   OPENWEATHER_API_KEY is checked before any request is made.  Without it
#   every tool returns an error telling the caller where to get a free key.
# =============================================================================

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import httpx

from gateway.catalog import ToolCatalog
from gateway.config import Settings
from gateway.dispatcher import GatewayConfig, ToolBinding
from gateway.http import (
    ClientFactory,
    UpstreamError,
    default_client_factory,
    describe_http_error,
    json_body,
    status_error,
)
from gateway.models import (
    ArgumentError,
    Err,
    FieldKind,
    FieldSpec,
    HandlerResult,
    Ok,
    ToolArguments,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "weather-server"
SERVER_VERSION = "1.0.0"

DEFAULT_FORECAST_DAYS = 3
MAX_FORECAST_DAYS = 5
# The forecast endpoint returns one entry every 3 hours.
_ENTRIES_PER_DAY = 8

MISSING_KEY_MESSAGE = (
    "OPENWEATHER_API_KEY environment variable not set. "
    "Please get a free API key from https://openweathermap.org/api"
)

_RULE = "━" * 31


# =============================================================================
# Catalog entries
# =============================================================================
CURRENT_WEATHER_TOOL = ToolDescriptor(
    name="get_current_weather",
    description=(
        "Get the current weather for a specific city. Returns temperature, "
        "conditions, humidity, and wind speed."
    ),
    input_schema=(
        FieldSpec(
            "city",
            FieldKind.STRING,
            "City name (e.g., 'London', 'New York', 'Tokyo'). Can include country "
            "code for precision (e.g., 'London,UK')",
            required=True,
        ),
    ),
)

FORECAST_TOOL = ToolDescriptor(
    name="get_weather_forecast",
    description="Get weather forecast for the next few days for a specific city.",
    input_schema=(
        FieldSpec("city", FieldKind.STRING, "City name (e.g., 'London', 'New York', 'Tokyo')", required=True),
        FieldSpec(
            "days",
            FieldKind.NUMBER,
            "Number of days to forecast (1-5, default: 3)",
            default=DEFAULT_FORECAST_DAYS,
        ),
    ),
)

COMPARE_TOOL = ToolDescriptor(
    name="compare_weather",
    description="Compare current weather between two cities.",
    input_schema=(
        FieldSpec("city1", FieldKind.STRING, "First city name", required=True),
        FieldSpec("city2", FieldKind.STRING, "Second city name", required=True),
    ),
)


# -----------------------------------------------------------------------------
# Argument records
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class CurrentWeatherArgs(ToolArguments):
    city: str

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "CurrentWeatherArgs":
        return cls(city=arguments["city"], extra=cls._extra(arguments, ("city",)))


@dataclass(frozen=True)
class ForecastArgs(ToolArguments):
    city: str
    days: int = DEFAULT_FORECAST_DAYS

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "ForecastArgs":
        days = arguments.get("days")
        if days is None:
            days = DEFAULT_FORECAST_DAYS
        elif (
            not (isinstance(days, int) or days.is_integer())
            or not 1 <= days <= MAX_FORECAST_DAYS
        ):
            raise ArgumentError(
                f"invalid field days: expected a whole number between 1 and {MAX_FORECAST_DAYS}"
            )
        return cls(
            city=arguments["city"],
            days=int(days),
            extra=cls._extra(arguments, ("city", "days")),
        )


@dataclass(frozen=True)
class CompareWeatherArgs(ToolArguments):
    city1: str
    city2: str

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "CompareWeatherArgs":
        return cls(
            city1=arguments["city1"],
            city2=arguments["city2"],
            extra=cls._extra(arguments, ("city1", "city2")),
        )


# =============================================================================
# Data shapes
# =============================================================================
@dataclass(frozen=True)
class CurrentWeather:
    temperature: int                   # °C
    feels_like: int                    # °C
    condition: str                     # "Clouds"
    description: str                   # "broken clouds"
    humidity: int                      # %
    wind_speed: int                    # km/h
    city: str
    country: str


@dataclass(frozen=True)
class ForecastDay:
    date: str                          # "2025-07-15"
    temp_min: float
    temp_max: float
    condition: str
    description: str


@dataclass(frozen=True)
class Forecast:
    city: str
    country: str
    days: list[ForecastDay] = field(default_factory=list)


def _round(value: float) -> int:
    # Half-up: 2.5 -> 3, where round() would give 2.
    return math.floor(value + 0.5)


def _unexpected(exc: Exception) -> UpstreamError:
    return UpstreamError(f"Unexpected response from Weather API: {exc!r}")


def parse_current_weather(data: dict[str, Any]) -> CurrentWeather:
    try:
        return CurrentWeather(
            temperature=_round(data["main"]["temp"]),
            feels_like=_round(data["main"]["feels_like"]),
            condition=data["weather"][0]["main"],
            description=data["weather"][0]["description"],
            humidity=data["main"]["humidity"],
            wind_speed=_round(data["wind"]["speed"] * 3.6),
            city=data["name"],
            country=data["sys"]["country"],
        )
    except (KeyError, IndexError, TypeError) as exc:
        raise _unexpected(exc) from exc


def parse_forecast(data: dict[str, Any], days: int) -> Forecast:
    """Collapse 3-hourly entries into one summary per calendar date.

    The first entry seen for a date stands for that day.  Only the first
    ``days`` dates are kept.
    """
    try:
        daily: dict[str, ForecastDay] = {}
        for item in data["list"]:
            date = item["dt_txt"].split(" ")[0]
            if date in daily:
                continue
            daily[date] = ForecastDay(
                date=date,
                temp_min=item["main"]["temp_min"],
                temp_max=item["main"]["temp_max"],
                condition=item["weather"][0]["main"],
                description=item["weather"][0]["description"],
            )
        return Forecast(
            city=data["city"]["name"],
            country=data["city"]["country"],
            days=list(daily.values())[:days],
        )
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise _unexpected(exc) from exc


# =============================================================================
# Rendering (pure)
# =============================================================================
def render_current(weather: CurrentWeather) -> str:
    return (
        f"Current Weather in {weather.city}, {weather.country}:\n"
        f"{_RULE}\n"
        f"🌡️  Temperature: {weather.temperature}°C (feels like {weather.feels_like}°C)\n"
        f"☁️  Condition: {weather.condition} - {weather.description}\n"
        f"💧 Humidity: {weather.humidity}%\n"
        f"💨 Wind Speed: {weather.wind_speed} km/h"
    )


def render_forecast(forecast: Forecast, days: int) -> str:
    lines = [f"{days}-Day Weather Forecast for {forecast.city}, {forecast.country}:\n{_RULE}\n\n"]
    for index, day in enumerate(forecast.days, start=1):
        lines.append(f"Day {index} ({day.date}):\n")
        lines.append(f"  🌡️  {_round(day.temp_min)}°C - {_round(day.temp_max)}°C\n")
        lines.append(f"  ☁️  {day.condition} - {day.description}\n\n")
    return "".join(lines)


def _comparison_block(weather: CurrentWeather) -> str:
    return (
        f"{weather.city}, {weather.country}:\n"
        f"  🌡️  {weather.temperature}°C (feels like {weather.feels_like}°C)\n"
        f"  ☁️  {weather.condition} - {weather.description}\n"
        f"  💧 {weather.humidity}% humidity"
    )


def render_comparison(first: CurrentWeather, second: CurrentWeather) -> str:
    diff = abs(first.temperature - second.temperature)
    if diff == 0:
        verdict = f"{first.city} and {second.city} have the same temperature"
    else:
        warmer = first.city if first.temperature > second.temperature else second.city
        verdict = f"{warmer} is {diff}°C warmer"
    return (
        f"Weather Comparison:\n{_RULE}\n\n"
        f"{_comparison_block(first)}\n\n"
        f"{_comparison_block(second)}\n\n"
        f"📊 Comparison:\n  {verdict}"
    )


# =============================================================================
# Handlers
# =============================================================================
class WeatherTools:
    """Handlers for the weather server.

    Args:
        client_factory: Builds the httpx client used for one invocation.
        settings_loader: Returns the settings in effect for one invocation.
    """

    def __init__(
        self,
        client_factory: ClientFactory = default_client_factory,
        settings_loader: Callable[[], Settings] = Settings.from_env,
    ):
        self._client_factory = client_factory
        self._settings_loader = settings_loader

    async def current_weather(self, args: CurrentWeatherArgs) -> HandlerResult:
        settings = self._settings_loader()
        if not settings.openweather_api_key:
            return Err(MISSING_KEY_MESSAGE)
        try:
            async with self._client_factory(settings) as client:
                weather = await self.fetch_weather(client, settings, args.city)
        except UpstreamError as exc:
            return Err(str(exc))
        return Ok(render_current(weather))

    async def forecast(self, args: ForecastArgs) -> HandlerResult:
        settings = self._settings_loader()
        if not settings.openweather_api_key:
            return Err(MISSING_KEY_MESSAGE)
        try:
            async with self._client_factory(settings) as client:
                forecast = await self.fetch_forecast(client, settings, args.city, args.days)
        except UpstreamError as exc:
            return Err(str(exc))
        return Ok(render_forecast(forecast, args.days))

    async def compare(self, args: CompareWeatherArgs) -> HandlerResult:
        settings = self._settings_loader()
        if not settings.openweather_api_key:
            return Err(MISSING_KEY_MESSAGE)

        async with self._client_factory(settings) as client:
            # Both fetches run to completion; results stay in argument order.
            results = await asyncio.gather(
                self.fetch_weather(client, settings, args.city1),
                self.fetch_weather(client, settings, args.city2),
                return_exceptions=True,
            )
        for result in results:
            if isinstance(result, UpstreamError):
                return Err(str(result))
            if isinstance(result, BaseException):
                raise result
        first, second = results
        logger.info("Compared %s (%s°C) with %s (%s°C)",
                    first.city, first.temperature, second.city, second.temperature)
        return Ok(render_comparison(first, second))

    # -------------------------------------------------------------------------
    # Upstream calls
    # -------------------------------------------------------------------------
    async def fetch_weather(
        self, client: httpx.AsyncClient, settings: Settings, city: str
    ) -> CurrentWeather:
        data = await self._get(
            client,
            f"{settings.weather_api_base}/weather",
            {"q": city, "appid": settings.openweather_api_key, "units": "metric"},
            "Weather API",
        )
        return parse_current_weather(data)

    async def fetch_forecast(
        self, client: httpx.AsyncClient, settings: Settings, city: str, days: int
    ) -> Forecast:
        data = await self._get(
            client,
            f"{settings.weather_api_base}/forecast",
            {
                "q": city,
                "appid": settings.openweather_api_key,
                "units": "metric",
                "cnt": days * _ENTRIES_PER_DAY,
            },
            "Forecast API",
        )
        return parse_forecast(data, days)

    async def _get(
        self, client: httpx.AsyncClient, url: str, params: dict[str, Any], upstream: str
    ) -> dict[str, Any]:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(describe_http_error(exc)) from exc
        if not response.is_success:
            raise status_error(upstream, response)
        data = json_body(response, upstream)
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected response from {upstream}: expected an object")
        return data


# =============================================================================
# Server configuration
# =============================================================================
def build_weather_gateway(
    client_factory: ClientFactory = default_client_factory,
    settings_loader: Callable[[], Settings] = Settings.from_env,
) -> GatewayConfig:
    """The weather server's catalog and handler table."""
    tools = WeatherTools(client_factory, settings_loader)
    return GatewayConfig(
        name=SERVER_NAME,
        version=SERVER_VERSION,
        catalog=ToolCatalog([CURRENT_WEATHER_TOOL, FORECAST_TOOL, COMPARE_TOOL]),
        handlers={
            CURRENT_WEATHER_TOOL.name: ToolBinding(CurrentWeatherArgs, tools.current_weather),
            FORECAST_TOOL.name: ToolBinding(ForecastArgs, tools.forecast),
            COMPARE_TOOL.name: ToolBinding(CompareWeatherArgs, tools.compare),
        },
    )
