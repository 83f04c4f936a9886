"""Error Handlers: global exception handlers shared by both tiers.

Invariants:
    - ChequeRelayError -> {success: false, error, code, ...} with its http_status
    - RequestValidationError -> 400 "Invalid input", field names only (never values)
    - Starlette HTTPException (unknown route, wrong method) -> {success: false, error}
    - Exception (catch-all) -> 500, never leaks internal details
    - Logged paths are masked (mask_path): lookup identifiers never reach logs

Design Decisions:
    - Four-layer handler: domain, validation, routing, catch-all
    - Extracted from the app factories so both tiers share one error shape
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cheque_relay.core.errors import ChequeRelayError, ErrorSeverity
from cheque_relay.infrastructure.observability import mask_path

logger = logging.getLogger(__name__)

_ROUTING_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
    413: "Request body too large",
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(ChequeRelayError)
    async def domain_error_handler(request: Request, exc: ChequeRelayError):
        """Handle all verification domain/infrastructure errors."""
        log = logger.error if exc.severity == ErrorSeverity.CRITICAL else logger.info
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": mask_path(request.url.path),
                "status_code": exc.http_status,
                "request_id": exc.context.request_id,
                "upstream_status": exc.context.upstream_status,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=exc.response_headers(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors without echoing input."""
        fields = _invalid_fields(exc)
        logger.warning(
            f"Validation error on {mask_path(request.url.path)}: {', '.join(fields)}",
            extra={"error_code": "VALIDATION_ERROR", "path": mask_path(request.url.path)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid input",
                "code": "VALIDATION_ERROR",
            },
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Routing-level errors (unknown path, wrong method, oversized body)."""
        message = _ROUTING_MESSAGES.get(exc.status_code, "Request failed")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": message},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {mask_path(request.url.path)}: {type(exc).__name__}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "code": "INTERNAL_ERROR",
            },
        )


def _invalid_fields(exc: RequestValidationError) -> list[str]:
    return [
        ".".join(str(loc) for loc in e.get("loc", ()))
        for e in exc.errors()
    ]
