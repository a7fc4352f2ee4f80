# =============================================================================
# servers/__init__.py
# =============================================================================
# MCP entry points.  This is the only package that imports the MCP SDK.
#
#   mcp_server.py      - GatewayConfig -> MCP Server, logging, run()
#   github_server.py   - github-diff-mcp
#   weather_server.py  - weather-mcp
# =============================================================================
