# =============================================================================
# gateway/http.py  -  Outbound HTTP helpers shared by the upstream handlers
# =============================================================================
#
# Each handler opens its own httpx.AsyncClient per invocation through a
# ClientFactory and closes it when the invocation ends.  Tests pass a factory
# that builds clients on an httpx.MockTransport.
# =============================================================================

from typing import Any, Callable

import httpx

from gateway.config import Settings

ClientFactory = Callable[[Settings], httpx.AsyncClient]


class UpstreamError(Exception):
    """An upstream call failed: transport error, non-2xx status or a response
    body that does not have the expected shape."""


def default_client_factory(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.http_timeout)


def describe_http_error(exc: httpx.HTTPError) -> str:
    # Some transport errors (e.g. ConnectError) stringify to "".
    return str(exc) or exc.__class__.__name__


def status_error(prefix: str, response: httpx.Response) -> UpstreamError:
    return UpstreamError(f"{prefix} error: {response.status_code} {response.reason_phrase}")


def json_body(response: httpx.Response, upstream: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{upstream} returned a response that is not JSON") from exc
