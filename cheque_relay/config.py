"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_public_settings() / get_internal_settings() are cached (lru_cache),
      one instance per process
    - The public tier never sees database settings; the internal tier never
      sees the upstream API URL

Design Decisions:
    - One settings class per tier over a shared flat class: the two tiers are
      deployed as separate processes with different secrets
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Settings shared by both tiers."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
    )

    environment: str = "development"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    # Number of reverse proxies in front of the process whose
    # X-Forwarded-For entries are trusted for client identification.
    trusted_proxy_hops: int = 1

    # Shared HS256 signing secret for inter-tier credentials
    jwt_secret: SecretStr | None = None

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def empty_secret_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("trusted_proxy_hops")
    @classmethod
    def non_negative_hops(cls, v: int) -> int:
        if v < 0:
            raise ValueError("trusted_proxy_hops must be >= 0")
        return v


class PublicSettings(CommonSettings):
    """Public verification tier ("backend")."""

    service_name: str = "cheque-verification-backend"

    # Internal tier
    api_url: str = "http://localhost:3000"
    api_timeout_seconds: float = 5.0

    # Credential minting
    jwt_issuer: str = "cheque-backend"
    jwt_audience: str = "cheque-api"
    jwt_ttl_seconds: int = 120
    # False keeps calling the internal tier unauthenticated when no secret
    # is configured; True refuses the call instead.
    gateway_fail_closed: bool = False

    # API
    frontend_url: str = "http://localhost:5173"
    max_body_bytes: int = 100 * 1024

    # Admission control
    general_rate_limit_max_requests: int = 50
    general_rate_limit_window_seconds: int = 15 * 60
    verify_rate_limit_max_requests: int = 5
    verify_rate_limit_window_seconds: int = 5 * 60
    verify_slowdown_delay_after: int = 3
    verify_slowdown_delay_step_ms: int = 1000
    verify_slowdown_max_delay_ms: int = 10_000
    health_rate_limit_max_requests: int = 60
    health_rate_limit_window_seconds: int = 60

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must be an http(s) URL")
        return v

    @field_validator("api_timeout_seconds")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("api_timeout_seconds must be positive")
        return v


class InternalSettings(CommonSettings):
    """Internal data-access tier ("api")."""

    service_name: str = "cheque-verification-api"

    # Database
    database_url: str = (
        "postgresql+asyncpg://cheque:cheque@db:5432/cheque"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 0
    database_pool_timeout_seconds: float = 5.0

    # Externally-owned record table (read-only)
    cheque_schema: str | None = None
    cheque_table: str = "cheque_verification"
    cheque_number_column: str = "cheque_number"
    cheque_status_column: str = "cheque_status"
    payment_issue_date_column: str = "payment_issue_date"
    applied_amount_column: str = "applied_amount"

    # Credential check
    auth_disabled: bool = False
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    jwt_clock_tolerance_seconds: int = 10

    # Admission control
    rate_limit_window_minutes: int = 15
    rate_limit_max_requests: int = 50
    health_rate_limit_max_requests: int = 60
    health_rate_limit_window_seconds: int = 60

    # API
    cors_origins: list[str] = ["http://localhost:4000"]

    @field_validator("jwt_issuer", "jwt_audience", "cheque_schema", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@lru_cache
def get_public_settings() -> PublicSettings:
    return PublicSettings()


@lru_cache
def get_internal_settings() -> InternalSettings:
    return InternalSettings()
