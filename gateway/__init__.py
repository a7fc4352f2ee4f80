# =============================================================================
# gateway/__init__.py
# =============================================================================
# This package contains the tool-invocation gateway and the upstream handlers
# it fronts.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports the MCP SDK.  The gateway speaks in plain
#   dataclasses (ToolDescriptor, ResponseEnvelope); servers/ translates them
#   to and from MCP protocol types.
#
# LAYOUT:
#   models.py      - descriptors, validation outcomes, results, envelopes
#   catalog.py     - the fixed, ordered tool catalog
#   validation.py  - argument checking against a descriptor's schema
#   envelope.py    - the only place envelopes are built
#   dispatcher.py  - GatewayConfig + Dispatcher (lookup, validate, invoke)
#   config.py      - environment-backed settings
#   http.py        - shared HTTP client factory and UpstreamError
#   github.py      - git_changes_between_versions
#   weather.py     - get_current_weather, get_weather_forecast, compare_weather
# =============================================================================
