"""Public Verification Tier: FastAPI application entry point (the "backend").

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChequeRelayError -> {success: false, error} JSON
    - CORS allows only the configured frontend origin, GET/POST, no credentials
    - The shared httpx client, admission counters and service are owned by the
      app (app.state), created by create_app and released in the lifespan
    - Request bodies larger than max_body_bytes are rejected with 413

Design Decisions:
    - App factory with injectable gateway / clock / sleep: tests build isolated apps
    - Lifespan over @app.on_event for startup/shutdown
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cheque_relay.api.error_handlers import register_error_handlers
from cheque_relay.api.routes import cheque_verify, health
from cheque_relay.config import PublicSettings, get_public_settings
from cheque_relay.core.repository_protocols import ChequeGateway
from cheque_relay.infrastructure.admission_control import AdmissionControl, Clock, Sleep
from cheque_relay.infrastructure.credentials import TokenSigner
from cheque_relay.infrastructure.internal_api_client import InternalApiClient
from cheque_relay.infrastructure.observability import install_request_logging, setup_logging
from cheque_relay.services.verify_cheque import ChequeVerificationService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: PublicSettings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, settings.service_name)
    if settings.jwt_secret is None:
        logger.warning("JWT_SECRET not set: internal API calls will be unauthenticated")
    logger.info(f"Cheque verification backend started, API at {settings.api_url}")
    try:
        yield
    finally:
        logger.info("Cheque verification backend shutting down")
        gateway = app.state.gateway
        if isinstance(gateway, InternalApiClient):
            try:
                await gateway.aclose()
            except Exception as e:
                logger.warning(f"HTTP client shutdown failed: {e}")
        app.state.admission.reset()


def build_gateway(settings: PublicSettings) -> InternalApiClient:
    signer = None
    if settings.jwt_secret is not None:
        signer = TokenSigner(
            secret=settings.jwt_secret.get_secret_value(),
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            ttl_seconds=settings.jwt_ttl_seconds,
        )
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.api_timeout_seconds),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
        headers={"User-Agent": f"{settings.service_name}/1.0.0"},
    )
    return InternalApiClient(
        http_client,
        settings.api_url,
        signer=signer,
        timeout_seconds=settings.api_timeout_seconds,
        fail_closed=settings.gateway_fail_closed,
    )


def _install_body_limit(app: FastAPI, max_body_bytes: int) -> None:

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > max_body_bytes:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"success": False, "error": "Request body too large"},
            )
        return await call_next(request)


def create_app(
    settings: PublicSettings | None = None,
    *,
    gateway: ChequeGateway | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> FastAPI:
    settings = settings or get_public_settings()
    app = FastAPI(
        title="Cheque Verification Backend", version="1.0.0", lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.admission = AdmissionControl.for_public(settings, clock, sleep)
    app.state.gateway = gateway if gateway is not None else build_gateway(settings)
    app.state.verification_service = ChequeVerificationService(app.state.gateway)

    _install_body_limit(app, settings.max_body_bytes)
    install_request_logging(
        app,
        skip_prefixes=("/health",),
        trusted_proxy_hops=settings.trusted_proxy_hops,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID"],
        allow_credentials=False,
    )

    # Routes: explicit registration
    app.include_router(cheque_verify.router)
    app.include_router(health.public_router)

    register_error_handlers(app)
    return app


app = create_app()
