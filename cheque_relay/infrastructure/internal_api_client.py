"""Internal API Client: the authenticated httpx call from the public tier to the internal tier.

Invariants:
    - One outbound GET per verification, never retried
    - Fixed total deadline (5s default) over connect, send and the whole body
      read; a timeout is GatewayTimeout, distinct from other transport failures
    - Status < 500 -> GatewaySuccess (4xx are data); >= 500 -> GatewayHttpError
    - Bearer credential minted per call when a secret is configured; without one
      the call proceeds unauthenticated with a warning, unless fail_closed
    - The URL path carries only a validated ChequeIdentifier (digits only)
    - Logs carry the identifier length, never the identifier

Design Decisions:
    - Shared httpx.AsyncClient owned by the app lifespan (connection pooling)
    - Returns tagged GatewayResult variants; interpretation lives in
      core/gateway_result.py
    - asyncio.timeout bounds the whole call; httpx timeouts apply per phase
"""

import asyncio
import logging

import httpx

from cheque_relay.core.domain_types import ChequeIdentifier
from cheque_relay.core.errors import AuthConfigError
from cheque_relay.core.gateway_result import (
    GatewayHttpError,
    GatewayNetworkError,
    GatewayResult,
    GatewaySuccess,
    GatewayTimeout,
)
from cheque_relay.core.validate_cheque_number import is_valid_cheque_number
from cheque_relay.infrastructure.credentials import TokenSigner

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class InternalApiClient:
    """Calls GET {api_url}/api/v1/cheque/{identifier} on the internal tier."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: str,
        signer: TokenSigner | None = None,
        timeout_seconds: float = 5.0,
        fail_closed: bool = False,
    ):
        self.client = http_client
        self.api_url = api_url.rstrip("/")
        self.signer = signer
        self.timeout_seconds = timeout_seconds
        self.fail_closed = fail_closed

    def _headers(self, request_id: str | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id
        if self.signer is not None:
            headers["Authorization"] = f"Bearer {self.signer.mint()}"
        elif self.fail_closed:
            raise AuthConfigError()
        else:
            logger.warning("No JWT secret configured - making unauthenticated request")
        return headers

    async def fetch_cheque(
        self, identifier: ChequeIdentifier, request_id: str | None = None,
    ) -> GatewayResult:
        if not is_valid_cheque_number(identifier):
            raise ValueError("Invalid cheque number format")

        headers = self._headers(request_id)
        url = f"{self.api_url}/api/v1/cheque/{identifier}"
        logger.info(
            "Calling internal API",
            extra={
                "cheque_number_length": len(identifier),
                "has_auth": "Authorization" in headers,
                "request_id": request_id,
            },
        )

        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self.client.get(
                    url, headers=headers, timeout=self.timeout_seconds,
                )
        except (httpx.TimeoutException, TimeoutError):
            logger.error("Internal API request timed out", extra={"request_id": request_id})
            return GatewayTimeout()
        except httpx.TransportError as e:
            logger.error(
                f"Internal API unreachable: {type(e).__name__}",
                extra={"request_id": request_id},
            )
            return GatewayNetworkError(detail=type(e).__name__)

        body = _json_or_none(response)
        logger.info(
            "Internal API response received",
            extra={"upstream_status": response.status_code, "request_id": request_id},
        )
        if response.status_code >= 500:
            return GatewayHttpError(status=response.status_code, body=body)
        return GatewaySuccess(status=response.status_code, body=body)

    async def aclose(self) -> None:
        await self.client.aclose()


def _json_or_none(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return None
