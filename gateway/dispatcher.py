# =============================================================================
# gateway/dispatcher.py  -  Handler Table & Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the immutable GatewayConfig (catalog + handler table) and the
#   Dispatcher that runs one invocation against it.
#
# THE FLOW FOR ONE "call tool" REQUEST:
#   1. Resolve the tool name in the catalog   -> "Unknown tool: <name>"
#   2. Validate the arguments                 -> the validation reason
#   3. Build the tool's typed argument record -> the construction reason
#   4. Await the handler
#        Ok(text)     -> success envelope
#        Err(message) -> "Error: <message>", is_error
#   5. Anything a handler or record constructor still raises (other than
#      ArgumentError) is logged and converted like Err.
#
# Steps 1-3 never touch a handler, so nothing goes over the network for a
# request that is rejected there.
#
# The Dispatcher keeps no state between requests.  GatewayConfig is frozen
# and its handler table is a read-only mapping.
# =============================================================================

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from gateway import envelope
from gateway.catalog import ToolCatalog
from gateway.models import (
    ArgumentError,
    Err,
    HandlerResult,
    Invalid,
    Invocation,
    Ok,
    ResponseEnvelope,
    ToolArguments,
    ToolDescriptor,
)
from gateway.validation import validate_arguments

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class ToolBinding:
    """One row of the handler table: how to build the tool's arguments and
    which coroutine function runs it."""

    args_type: type[ToolArguments]
    handler: Handler


@dataclass(frozen=True)
class GatewayConfig:
    """Everything a server needs, built once at startup.

    Args:
        name: Server identity advertised to clients.
        version: Server version advertised to clients.
        catalog: The tools this server exposes, in listing order.
        handlers: Tool name -> ToolBinding.  Must cover exactly the catalog.
    """

    name: str
    version: str
    catalog: ToolCatalog
    handlers: Mapping[str, ToolBinding]

    def __post_init__(self) -> None:
        catalog_names = set(self.catalog.names())
        handler_names = set(self.handlers)
        if catalog_names != handler_names:
            missing = sorted(catalog_names - handler_names)
            orphaned = sorted(handler_names - catalog_names)
            raise ValueError(
                f"Handler table does not match catalog "
                f"(no handler: {missing}, not in catalog: {orphaned})"
            )
        object.__setattr__(self, "handlers", MappingProxyType(dict(self.handlers)))


class Dispatcher:
    """Routes invocations to handlers and turns every outcome into an envelope."""

    def __init__(self, config: GatewayConfig):
        self._config = config

    @property
    def config(self) -> GatewayConfig:
        return self._config

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        """The listing endpoint: the full catalog in registration order."""
        return self._config.catalog.list()

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any] | None = None
    ) -> ResponseEnvelope:
        return await self.dispatch(Invocation(tool_name=name, arguments=arguments))

    async def dispatch(self, invocation: Invocation) -> ResponseEnvelope:
        """Run one invocation end to end.  Never raises for tool-level failures."""
        name = invocation.tool_name

        descriptor = self._config.catalog.get(name)
        if descriptor is None:
            logger.warning("Rejected call to unknown tool %r", name)
            return envelope.rejection(f"Unknown tool: {name}")

        outcome = validate_arguments(descriptor, invocation.arguments)
        if isinstance(outcome, Invalid):
            logger.info("Rejected %s: %s", name, outcome.reason)
            return envelope.rejection(outcome.reason)

        binding = self._config.handlers[name]
        try:
            args = binding.args_type.from_arguments(outcome.arguments)
        except ArgumentError as exc:
            logger.info("Rejected %s: %s", name, exc)
            return envelope.rejection(str(exc))
        except Exception as exc:
            logger.exception("Building arguments for %s raised", name)
            return envelope.failure(str(exc) or exc.__class__.__name__)

        try:
            result = await binding.handler(args)
        except Exception as exc:
            logger.exception("Handler for %s raised", name)
            return envelope.failure(str(exc) or exc.__class__.__name__)

        if isinstance(result, Ok):
            return envelope.success(result.text)
        if isinstance(result, Err):
            return envelope.failure(result.message)
        logger.error("Handler for %s returned %r", name, result)
        return envelope.failure(f"Tool {name} returned no result")
