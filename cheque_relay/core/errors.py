"""Error Hierarchy: typed, categorized exceptions for every verification failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are recoverable; upstream/infrastructure errors (500-level) are critical
    - to_response() produces the {success: false, error, ...} envelope
    - No raw user input (cheque number, amount, date) is ever placed in a message

Design Decisions:
    - Single hierarchy with ChequeRelayError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields travel with the error,
      not with the logging call
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None
    upstream_status: int | None = None
    retry_after_seconds: int | None = None
    debug_info: dict[str, Any] | None = None


class ChequeRelayError(Exception):
    """Base exception for all cheque relay errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the public {success: false, error} envelope."""
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
        }

    def response_headers(self) -> dict[str, str] | None:
        return None


# ─── Client Errors (400-level) ──────────────────────────────────

class InputValidationError(ChequeRelayError):
    """Malformed or out-of-range input. Message is always generic."""
    def __init__(
        self, details: list[str] | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Invalid input", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.details = list(details or [])

    def to_response(self) -> dict:
        body = super().to_response()
        if self.details:
            body["details"] = self.details
        return body


class ChequeNotFoundError(ChequeRelayError):
    """No record exists for a well-formed identifier."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Cheque not found", "CHEQUE_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.INFO, context, 404,
        )


class VerificationMismatchError(ChequeRelayError):
    """Record found but the submitted fields disagree with it."""
    def __init__(self, reasons: list[str], context: ErrorContext | None = None):
        super().__init__(
            "Verification failed", "VERIFICATION_FAILED",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.INFO, context, 400,
        )
        self.reasons = list(reasons)

    def to_response(self) -> dict:
        body = super().to_response()
        body["details"] = self.reasons
        return body


class AuthError(ChequeRelayError):
    """Missing, expired or malformed inter-tier credential."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ClaimsMismatchError(ChequeRelayError):
    """Credential verified but its claims are not the expected ones."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid JWT claims", "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class RateLimitExceededError(ChequeRelayError):
    """Client exceeded an admission-control window."""
    def __init__(self, retry_after_seconds: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Too many requests. Please try again later.", "RATE_LIMITED",
            ErrorCategory.RATE_LIMIT, ErrorSeverity.WARNING, ctx, 429,
        )
        self.retry_after_seconds = retry_after_seconds

    def to_response(self) -> dict:
        body = super().to_response()
        body["retryAfter"] = self.retry_after_seconds
        return body

    def response_headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.retry_after_seconds)}


# ─── Server / Upstream Errors (500-level) ───────────────────────

class AuthConfigError(ChequeRelayError):
    """Auth subsystem is not configured: a deployment mistake, not a client one."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Server authentication is not configured", "AUTH_NOT_CONFIGURED",
            ErrorCategory.CONFIGURATION, ErrorSeverity.CRITICAL, context, 500,
        )


class UpstreamTimeoutError(ChequeRelayError):
    """Internal tier did not answer within the request timeout."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "API request timed out", "UPSTREAM_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.CRITICAL, context, 504,
        )


class UpstreamUnavailableError(ChequeRelayError):
    """Internal tier failed or was unreachable."""
    def __init__(
        self,
        message: str = "Error communicating with API service",
        http_status: int = 500,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "UPSTREAM_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, http_status,
        )


class DatabaseError(ChequeRelayError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            "Database error", "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
        self.detail = message
