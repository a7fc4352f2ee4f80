# =============================================================================
# servers/mcp_server.py  -  MCP Binding for a GatewayConfig
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Puts a GatewayConfig on the wire.  It builds an MCP low-level Server whose
#   two request handlers delegate straight to the gateway:
#
#     tools/list  ->  Dispatcher.list_tools()  ->  list[mcp.types.Tool]
#     tools/call  ->  Dispatcher.call_tool()   ->  mcp.types.CallToolResult
#
#   The SDK's own input-schema validation is switched off so the gateway's
#   validator decides what a bad request looks like.
#
# RUNNING:
#   Each server module (github_server, weather_server) calls run() with its
#   gateway builder.  run() loads .env, configures logging, then serves MCP
#   over stdin/stdout until the client disconnects.
# =============================================================================

import asyncio
import json
import logging
import os
import sys
from typing import Any, Callable

import mcp.types as types
from dotenv import load_dotenv
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from gateway.dispatcher import Dispatcher, GatewayConfig
from gateway.models import ResponseEnvelope, ToolDescriptor

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR.  STDOUT carries the MCP JSON-RPC stream and anything
# else written there corrupts it.
#
#   CYAN   incoming tool calls
#   GREEN  responses
#   YELLOW errors returned to the caller
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_MAX_LOGGED_RESPONSE = 500


def level_from_env() -> tuple[int, str | None]:
    """Resolve LOG_LEVEL to a logging level.

    Returns the level and, when LOG_LEVEL names no known level, the rejected
    value (the level is then INFO).
    """
    raw = os.environ.get("LOG_LEVEL") or "INFO"
    level = logging.getLevelName(raw.strip().upper())
    if isinstance(level, int):
        return level, None
    return logging.INFO, raw


def configure_logging() -> None:
    level, rejected = level_from_env()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    if rejected is not None:
        logging.warning("Ignoring LOG_LEVEL=%r (unknown level), using INFO", rejected)


def _log_request(tool_name: str, arguments: dict[str, Any] | None) -> None:
    """Log an incoming tool call with its arguments in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in (arguments or {}).items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_response(tool_name: str, envelope: ResponseEnvelope) -> None:
    """Log the envelope as compact JSON, GREEN for results, YELLOW for errors."""
    colour = _YELLOW if envelope.is_error else _GREEN
    body = json.dumps(envelope.to_dict(), ensure_ascii=False, separators=(",", ":"))
    if len(body) > _MAX_LOGGED_RESPONSE:
        body = body[:_MAX_LOGGED_RESPONSE] + "..."
    logging.info(f"{colour}  ← {tool_name} response: {body}{_RESET}")


# =============================================================================
# Gateway <-> MCP type conversion
# =============================================================================
def to_mcp_tool(descriptor: ToolDescriptor) -> types.Tool:
    wire = descriptor.to_dict()
    return types.Tool(
        name=wire["name"],
        description=wire["description"],
        inputSchema=wire["inputSchema"],
    )


def to_call_tool_result(envelope: ResponseEnvelope) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=block.text) for block in envelope.content],
        isError=envelope.is_error,
    )


def create_server(config: GatewayConfig) -> Server:
    """Build an MCP server that serves ``config``'s catalog and handlers."""
    dispatcher = Dispatcher(config)
    server = Server(config.name, version=config.version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [to_mcp_tool(descriptor) for descriptor in dispatcher.list_tools()]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        _log_request(name, arguments)
        envelope = await dispatcher.call_tool(name, arguments)
        _log_response(name, envelope)
        return to_call_tool_result(envelope)

    return server


# =============================================================================
# Server entry point
# =============================================================================
async def serve_stdio(server: Server, banner: str) -> None:
    async with stdio_server() as (read_stream, write_stream):
        logging.info(f"{banner} running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run(build_config: Callable[[], GatewayConfig], banner: str) -> None:
    """Load .env, then serve the gateway over stdio.

    Failing to build the gateway or to open the stdio transport is the one
    fatal condition: it is reported on stderr and the process exits with
    status 1.
    """
    load_dotenv()
    configure_logging()
    try:
        server = create_server(build_config())
        asyncio.run(serve_stdio(server, banner))
    except KeyboardInterrupt:
        logging.info(f"{banner} stopped")
    except Exception as exc:
        logging.critical("Fatal error: %s", exc, exc_info=True)
        sys.exit(1)
