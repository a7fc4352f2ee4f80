# =============================================================================
# gateway/models.py  -  Data Models
# =============================================================================
#
# These dataclasses define the shape of everything that flows through the
# gateway: the tool catalog entries, the outcome of validation, the result a
# handler hands back, and the envelope returned to the caller.
#
# All of them are frozen.  The catalog and handler table live for the whole
# process; invocations, outcomes and envelopes are built fresh per request
# and never mutated after they are returned.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union


# -----------------------------------------------------------------------------
# Input schema
# -----------------------------------------------------------------------------
class FieldKind(str, Enum):
    """Primitive kinds a tool argument can declare."""

    STRING = "string"
    NUMBER = "number"

    def accepts(self, value: Any) -> bool:
        """Return True if ``value`` is of this primitive kind."""
        if self is FieldKind.STRING:
            return isinstance(value, str)
        # bool is an int subclass; JSON true/false is not a number.
        return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class FieldSpec:
    """One named argument in a tool's input schema."""

    name: str
    kind: FieldKind
    description: str = ""
    required: bool = False
    default: Any = None

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolDescriptor:
    """An immutable catalog entry: what a tool is called and what it takes.

    ``input_schema`` lists the fields the tool knows about.  Fields marked
    ``required`` must be present for an invocation to reach the handler;
    anything not listed is optional and passed through untouched.
    """

    name: str
    description: str
    input_schema: tuple[FieldSpec, ...] = ()

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.input_schema if f.required)

    def get_field(self, name: str) -> FieldSpec | None:
        for spec in self.input_schema:
            if spec.name == name:
                return spec
        return None

    def to_dict(self) -> dict[str, Any]:
        """Render the descriptor in the wire shape used by ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": {f.name: f.to_json_schema() for f in self.input_schema},
                "required": list(self.required_fields),
            },
        }


# -----------------------------------------------------------------------------
# Invocation & validation outcome
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Invocation:
    """One request to run ``tool_name``.  ``arguments`` is None when the
    request carried no arguments object at all."""

    tool_name: str
    arguments: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Valid:
    arguments: Mapping[str, Any]


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationOutcome = Union[Valid, Invalid]


# -----------------------------------------------------------------------------
# Handler results
# -----------------------------------------------------------------------------
# Handlers never raise for expected failures (bad repo string, upstream 404,
# missing API key).  They return Err and the dispatcher decides what the
# caller sees.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Ok:
    text: str


@dataclass(frozen=True)
class Err:
    message: str


HandlerResult = Union[Ok, Err]


# -----------------------------------------------------------------------------
# Typed argument records
# -----------------------------------------------------------------------------
class ArgumentError(ValueError):
    """Raised by ``ToolArguments.from_arguments`` when a validated mapping
    still cannot be turned into the tool's argument record."""


@dataclass(frozen=True)
class ToolArguments:
    """Base for per-tool argument records.

    Subclasses declare the fields their tool understands and implement
    ``from_arguments`` to build themselves from an already-validated mapping.
    Keys the record does not know about are kept in ``extra``.
    """

    extra: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), kw_only=True
    )

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "ToolArguments":
        raise NotImplementedError

    @staticmethod
    def _extra(arguments: Mapping[str, Any], known: tuple[str, ...]) -> Mapping[str, Any]:
        return MappingProxyType({k: v for k, v in arguments.items() if k not in known})


# -----------------------------------------------------------------------------
# Response envelope
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TextBlock:
    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ResponseEnvelope:
    """The uniform output of every tool invocation.

    ``is_error`` True means every block's text is a human-readable
    diagnostic, never partial data.  Build these through
    ``gateway.envelope`` only.
    """

    content: tuple[TextBlock, ...]
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"content": [b.to_dict() for b in self.content]}
        if self.is_error:
            payload["isError"] = True
        return payload
