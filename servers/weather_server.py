# =============================================================================
# servers/weather_server.py  -  Weather MCP Server
# =============================================================================
#
#   weather-mcp                       (console script)
#   python -m servers.weather_server  (from a checkout)
#
# Tools: get_current_weather, get_weather_forecast, compare_weather
# Env:   OPENWEATHER_API_KEY, OPENWEATHER_API_BASE, HTTP_TIMEOUT_SECONDS
# =============================================================================

from gateway.weather import build_weather_gateway
from servers.mcp_server import run


def main() -> None:
    run(build_weather_gateway, "Weather MCP Server")


if __name__ == "__main__":
    main()
