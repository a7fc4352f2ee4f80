# =============================================================================
# gateway/config.py  -  Environment-backed Settings
# =============================================================================
#
# Credentials and upstream locations come from the process environment
# (optionally populated from a .env file by the server entry points).
#
# Settings are read when a handler runs, not at import time, so a key added
# to the environment after startup is picked up by the next call.
#
#   GITHUB_TOKEN           Bearer token for the GitHub API (optional)
#   OPENWEATHER_API_KEY    OpenWeatherMap API key (required by weather tools)
#   GITHUB_API_BASE        default https://api.github.com
#   OPENWEATHER_API_BASE   default https://api.openweathermap.org/data/2.5
#   HTTP_TIMEOUT_SECONDS   default 10
# =============================================================================

import logging
import math
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_API_BASE = "https://api.github.com"
DEFAULT_WEATHER_API_BASE = "https://api.openweathermap.org/data/2.5"
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    github_token: str = ""
    openweather_api_key: str = ""
    github_api_base: str = DEFAULT_GITHUB_API_BASE
    weather_api_base: str = DEFAULT_WEATHER_API_BASE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        """Snapshot the current environment."""
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN", "").strip(),
            openweather_api_key=os.environ.get("OPENWEATHER_API_KEY", "").strip(),
            github_api_base=os.environ.get("GITHUB_API_BASE", DEFAULT_GITHUB_API_BASE).rstrip("/"),
            weather_api_base=os.environ.get("OPENWEATHER_API_BASE", DEFAULT_WEATHER_API_BASE).rstrip("/"),
            http_timeout=_timeout_from_env(),
        )


def _timeout_from_env() -> float:
    raw = os.environ.get("HTTP_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning("Ignoring HTTP_TIMEOUT_SECONDS=%r (not a number)", raw)
        return DEFAULT_HTTP_TIMEOUT
    if not math.isfinite(timeout):
        logger.warning("Ignoring HTTP_TIMEOUT_SECONDS=%r (must be finite)", raw)
        return DEFAULT_HTTP_TIMEOUT
    if timeout <= 0:
        logger.warning("Ignoring HTTP_TIMEOUT_SECONDS=%r (must be positive)", raw)
        return DEFAULT_HTTP_TIMEOUT
    return timeout
