"""Structured Logging: JSON formatter, redaction, and per-request access logs.

Invariants:
    - All logs include timestamp, level, logger name, service, and message
    - Only allowlisted extra fields are surfaced; sensitive keys are redacted
      even if a caller passes them
    - Logged paths are masked: the lookup segment and digit segments become :id
      (/api/v1/cheque/123 -> /api/v1/cheque/:id)
    - httpx and httpcore log at WARNING or above: their INFO lines carry URLs
    - Every request carries an X-Request-ID (incoming or generated), echoed on the response
    - JSON format in production, human-readable in development

Design Decisions:
    - JSONFormatter over third-party libs: stdlib logging only
    - setup_logging called once on startup via lifespan
"""

import json
import logging
import re
import time
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, Request

REQUEST_ID_HEADER = "X-Request-ID"

_EXTRA_KEYS = (
    "request_id", "method", "path", "status_code", "client_ip",
    "duration_ms", "error_code", "cheque_number_length", "has_amount",
    "has_date", "upstream_status", "route_class", "retry_after", "has_auth",
    "admission_state",
)

REDACTED_KEYS = frozenset({
    "chequeNumber", "cheque_number", "appliedAmount", "applied_amount",
    "paymentIssueDate", "payment_issue_date", "authorization", "token",
    "secret", "password", "cookie",
})

_LOOKUP_SEGMENT = re.compile(r"(/v1/cheque/)[^/]+")
_DIGIT_SEGMENT = re.compile(r"/\d+(?=/|$)")
_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F-]{8,36}(?=/|$)")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def __init__(self, service: str | None = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            log["service"] = self.service
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        for key in REDACTED_KEYS:
            if key in record.__dict__:
                log[key] = "[Redacted]"
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json", service: str | None = None):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter(service))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs full request URLs at INFO, lookup identifiers included
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_path(path: str) -> str:
    """Replace the lookup segment and numeric or UUID-like segments with :id."""
    path = _LOOKUP_SEGMENT.sub(r"\1:id", path)
    path = _DIGIT_SEGMENT.sub("/:id", path)
    return _UUID_SEGMENT.sub("/:id", path)


def client_ip(request: Request, trusted_proxy_hops: int = 0) -> str:
    """Client address, honoring X-Forwarded-For up to trusted_proxy_hops."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and trusted_proxy_hops > 0:
        hops = [h.strip() for h in forwarded.split(",") if h.strip()]
        if hops:
            return hops[max(0, len(hops) - trusted_proxy_hops)]
    if request.client is not None:
        return request.client.host
    return "unknown"


def install_request_logging(
    app: FastAPI, skip_prefixes: tuple[str, ...] = (), trusted_proxy_hops: int = 0,
) -> None:
    """Register the access-log middleware on the app."""
    access_logger = logging.getLogger("cheque_relay.access")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        if not request.url.path.startswith(skip_prefixes):
            access_logger.info(
                "request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": mask_path(request.url.path),
                    "status_code": response.status_code,
                    "client_ip": client_ip(request, trusted_proxy_hops),
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
        return response
