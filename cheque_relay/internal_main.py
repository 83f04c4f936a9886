"""Internal Record Tier: FastAPI application entry point (the "API").

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Every cheque lookup requires a valid service credential unless
      auth_disabled is set; health probes never do
    - Lookups only read; the tier never writes the cheque table
    - Database pool and record source are created in the lifespan unless
      injected by create_app, and disposed on shutdown when owned

Design Decisions:
    - App factory with injectable record source / db manager / clock: tests
      run without a live database
    - Lifespan over @app.on_event for startup/shutdown
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cheque_relay.api.error_handlers import register_error_handlers
from cheque_relay.api.routes import cheque_lookup, health
from cheque_relay.config import InternalSettings, get_internal_settings
from cheque_relay.core.repository_protocols import ChequeRecordSource
from cheque_relay.db.cheque_table import ChequeTableNames, build_cheque_table
from cheque_relay.infrastructure.admission_control import AdmissionControl, Clock
from cheque_relay.infrastructure.credentials import TokenVerifier
from cheque_relay.infrastructure.database import DatabaseSessionManager
from cheque_relay.infrastructure.observability import install_request_logging, setup_logging
from cheque_relay.services.cheque_record_fetcher import ChequeRecordFetcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: InternalSettings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, settings.service_name)
    if settings.auth_disabled:
        logger.warning("AUTH_DISABLED is set: cheque lookups are unauthenticated")
    elif settings.jwt_secret is None:
        logger.error("JWT_SECRET not set: cheque lookups will fail with 500")

    owns_db = app.state.db_manager is None
    if owns_db:
        app.state.db_manager = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout_seconds,
        )
    if app.state.record_source is None:
        table = build_cheque_table(ChequeTableNames.from_settings(settings))
        app.state.record_source = ChequeRecordFetcher(app.state.db_manager, table)
    logger.info("Cheque verification API started")
    try:
        yield
    finally:
        logger.info("Cheque verification API shutting down")
        if owns_db:
            await app.state.db_manager.dispose()
        app.state.admission.reset()


def create_app(
    settings: InternalSettings | None = None,
    *,
    record_source: ChequeRecordSource | None = None,
    db_manager: DatabaseSessionManager | None = None,
    clock: Clock = time.monotonic,
) -> FastAPI:
    settings = settings or get_internal_settings()
    app = FastAPI(
        title="Cheque Verification API", version="1.0.0", lifespan=lifespan,
    )

    secret = settings.jwt_secret.get_secret_value() if settings.jwt_secret else None
    app.state.settings = settings
    app.state.admission = AdmissionControl.for_internal(settings, clock)
    app.state.token_verifier = TokenVerifier(
        secret=secret,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        leeway_seconds=settings.jwt_clock_tolerance_seconds,
    )
    app.state.db_manager = db_manager
    app.state.record_source = record_source

    install_request_logging(
        app,
        skip_prefixes=("/api/v1/health",),
        trusted_proxy_hops=settings.trusted_proxy_hops,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        allow_credentials=False,
    )

    # Routes: explicit registration
    app.include_router(cheque_lookup.router)
    app.include_router(health.internal_router)

    register_error_handlers(app)
    return app


app = create_app()
