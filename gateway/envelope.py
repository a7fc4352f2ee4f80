# =============================================================================
# gateway/envelope.py  -  Response Envelope Builder
# =============================================================================
#
# Every tool invocation ends here.  Keeping construction in one module keeps
# the "Error: ..." convention identical across every tool on every server.
# =============================================================================

from gateway.models import ResponseEnvelope, TextBlock


def success(text: str) -> ResponseEnvelope:
    """One text block carrying the handler's formatted output."""
    return ResponseEnvelope(content=(TextBlock(text),))


def failure(message: str) -> ResponseEnvelope:
    """A handler failure: ``"Error: <message>"`` with is_error set."""
    return ResponseEnvelope(content=(TextBlock(f"Error: {message}"),), is_error=True)


def rejection(reason: str) -> ResponseEnvelope:
    """An invocation refused before any handler ran (unknown tool, bad arguments)."""
    return ResponseEnvelope(content=(TextBlock(reason),), is_error=True)
