"""Gateway Results: what one internal-tier call can come back as, and what it means.

Invariants:
    - Exactly four variants: GatewaySuccess (status < 500), GatewayHttpError
      (status >= 500), GatewayTimeout, GatewayNetworkError
    - interpret_gateway_result is PURE: returns a ChequeRecord or raises a
      ChequeRelayError from core/errors.py
    - 4xx responses are data, never exceptions at the transport layer
    - Upstream error text is only forwarded when it is a string inside our own
      envelope shape

Design Decisions:
    - Tagged dataclasses over HTTP-client exceptions: any client library can
      produce these, and the mapping is testable without a network
"""

from dataclasses import dataclass
from typing import Any, Union

from cheque_relay.core.domain_types import ChequeRecord
from cheque_relay.core.errors import (
    ChequeNotFoundError,
    ErrorContext,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)


@dataclass(frozen=True)
class GatewaySuccess:
    """Upstream answered with a status below 500."""
    status: int
    body: Any


@dataclass(frozen=True)
class GatewayHttpError:
    """Upstream answered with a 5xx status."""
    status: int
    body: Any


@dataclass(frozen=True)
class GatewayTimeout:
    """No answer within the request timeout."""


@dataclass(frozen=True)
class GatewayNetworkError:
    """Connection-level failure (refused, reset, DNS, TLS)."""
    detail: str


GatewayResult = Union[GatewaySuccess, GatewayHttpError, GatewayTimeout, GatewayNetworkError]


def _envelope_error(body: Any) -> str | None:
    if isinstance(body, dict) and body.get("success") is False:
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return None


def interpret_gateway_result(
    result: GatewayResult, context: ErrorContext | None = None,
) -> ChequeRecord:
    """Map a gateway result to the fetched record or a typed error."""
    if isinstance(result, GatewayTimeout):
        raise UpstreamTimeoutError(context)

    if isinstance(result, GatewayNetworkError):
        raise UpstreamUnavailableError(context=context)

    if isinstance(result, GatewayHttpError):
        if context is not None:
            context.upstream_status = result.status
        message = _envelope_error(result.body)
        if message is None:
            raise UpstreamUnavailableError(context=context)
        status = 503 if result.status == 503 else 502
        raise UpstreamUnavailableError(message, status, context)

    if context is not None:
        context.upstream_status = result.status
    if result.status == 404:
        raise ChequeNotFoundError(context)
    if result.status == 429:
        raise UpstreamUnavailableError(http_status=503, context=context)
    if result.status >= 400:
        raise UpstreamUnavailableError(http_status=502, context=context)

    body = result.body
    if not isinstance(body, dict) or not body.get("success") or not body.get("data"):
        raise ChequeNotFoundError(context)
    try:
        return ChequeRecord.from_wire(body["data"])
    except (KeyError, TypeError):
        raise UpstreamUnavailableError(http_status=502, context=context)
