# =============================================================================
# gateway/validation.py  -  Argument Validator
# =============================================================================
#
# Checks a raw arguments mapping against a ToolDescriptor's input schema.
#
# RULES (applied in order, first failure wins):
#   1. No arguments object at all        -> Invalid("arguments required")
#   2. A required field is absent        -> Invalid("missing field <name>")
#   3. A declared field has the wrong
#      primitive kind                    -> Invalid("invalid field <name>: expected <kind>")
#   4. Otherwise                         -> Valid(arguments)
#
# Fields the schema does not declare are not inspected.  They travel to the
# handler unchanged.
# =============================================================================

from typing import Any, Mapping

from gateway.models import Invalid, ToolDescriptor, Valid, ValidationOutcome


def validate_arguments(
    descriptor: ToolDescriptor,
    arguments: Mapping[str, Any] | None,
) -> ValidationOutcome:
    """Validate ``arguments`` for ``descriptor``.

    Args:
        descriptor: The catalog entry for the tool being invoked.
        arguments: The invocation's arguments, or None if the request did not
            include an arguments object.

    Returns:
        Valid carrying the arguments, or Invalid with a reason suitable for
        showing to the caller.
    """
    if arguments is None:
        return Invalid("arguments required")
    if not isinstance(arguments, Mapping):
        return Invalid("arguments must be an object")

    for name in descriptor.required_fields:
        if name not in arguments:
            return Invalid(f"missing field {name}")

    for spec in descriptor.input_schema:
        if spec.name not in arguments:
            continue
        value = arguments[spec.name]
        if value is None and not spec.required:
            # An explicit null for an optional field means "use the default".
            continue
        if not spec.kind.accepts(value):
            return Invalid(f"invalid field {spec.name}: expected {spec.kind.value}")

    return Valid(arguments)
