"""Health & Readiness Probes: liveness and readiness endpoints for container orchestration.

Invariants:
    - Public GET /health always returns 200 if the process is up
    - Internal GET /api/v1/health is unauthenticated and never touches the database
    - Internal GET /api/v1/health/ready returns 503 if the database is unreachable
    - All probes sit behind the lenient health admission window

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from
      the load balancer
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from cheque_relay.api.dependencies import admission_guard
from cheque_relay.core.domain_types import RouteClass

_health_guard = [Depends(admission_guard(RouteClass.HEALTH))]

public_router = APIRouter(prefix="/health", tags=["health"], dependencies=_health_guard)
internal_router = APIRouter(prefix="/api/v1/health", tags=["health"], dependencies=_health_guard)


def _liveness() -> dict:
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@public_router.get("", status_code=status.HTTP_200_OK)
async def public_health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return _liveness()


@internal_router.get("", status_code=status.HTTP_200_OK)
async def internal_health_check():
    """Basic liveness probe for the internal tier."""
    return _liveness()


@internal_router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe, includes database connectivity."""
    db_manager = getattr(request.app.state, "db_manager", None)
    db_ok = await db_manager.health_check() if db_manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
