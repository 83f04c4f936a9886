"""Route Dependencies: app-owned resources, admission guards, and the credential check.

Invariants:
    - Resources are read from request.app.state, never from module globals
    - Admission guards run before body validation and business logic
    - The credential check runs before path validation on internal routes;
      rejected tokens never reach the record fetcher
"""

from typing import Awaitable, Callable

from fastapi import Request, Response

from cheque_relay.core.domain_types import RouteClass
from cheque_relay.core.errors import AuthConfigError
from cheque_relay.core.repository_protocols import ChequeRecordSource
from cheque_relay.infrastructure.admission_control import AdmissionControl
from cheque_relay.infrastructure.credentials import TokenVerifier, bearer_token
from cheque_relay.infrastructure.observability import client_ip
from cheque_relay.services.verify_cheque import ChequeVerificationService


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def admission_guard(route_class: RouteClass) -> Callable[..., Awaitable[None]]:
    """Build a dependency that admits or rejects a request for route_class."""

    async def guard(request: Request, response: Response) -> None:
        admission: AdmissionControl = request.app.state.admission
        hops = request.app.state.settings.trusted_proxy_hops
        decision = await admission.admit(
            route_class, client_ip(request, hops), request.url.path,
        )
        if decision is not None:
            response.headers["RateLimit-Limit"] = str(decision.limit)
            response.headers["RateLimit-Remaining"] = str(decision.remaining)
            response.headers["RateLimit-Reset"] = str(decision.reset_seconds)

    return guard


def get_verification_service(request: Request) -> ChequeVerificationService:
    return request.app.state.verification_service


def get_record_source(request: Request) -> ChequeRecordSource:
    return request.app.state.record_source


async def require_service_credential(request: Request) -> dict | None:
    """Verify the inter-tier bearer token unless auth is disabled."""
    if request.app.state.settings.auth_disabled:
        return None
    verifier: TokenVerifier = request.app.state.token_verifier
    if not verifier.secret:
        raise AuthConfigError()
    token = bearer_token(request.headers.get("Authorization"))
    return verifier.verify(token)
