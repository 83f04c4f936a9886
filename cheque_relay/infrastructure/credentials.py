"""Inter-tier Credentials: mint and verify short-lived HS256 service tokens.

Invariants:
    - A token is minted per outbound call and never cached
    - Minted tokens carry iss, aud, sub, purpose, iat, exp
    - Verification pins the algorithm to HS256 and requires exp
    - iss / aud are only checked when the verifier has them configured
    - Claims are checked against RequiredClaims after signature verification
    - Every failure maps to AuthError / ClaimsMismatchError / AuthConfigError
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from cheque_relay.core.errors import (
    AuthConfigError,
    AuthError,
    ClaimsMismatchError,
)
from cheque_relay.core.service_claims import (
    SERVICE_CLAIMS,
    RequiredClaims,
    claims_satisfied,
)

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenSigner:
    """Signing material held by the public tier."""
    secret: str
    issuer: str = "cheque-backend"
    audience: str = "cheque-api"
    ttl_seconds: int = 120
    claims: RequiredClaims = SERVICE_CLAIMS

    def mint(self, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            **self.claims.as_payload(),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)


@dataclass(frozen=True)
class TokenVerifier:
    """Verification material held by the internal tier."""
    secret: str | None
    issuer: str | None = None
    audience: str | None = None
    leeway_seconds: int = 10
    claims: RequiredClaims = SERVICE_CLAIMS

    def verify(self, token: str) -> dict:
        """Decode and check a bearer token. Returns the payload."""
        if not self.secret:
            raise AuthConfigError()
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                audience=self.audience,
                leeway=self.leeway_seconds,
                options={
                    "require": ["exp"],
                    "verify_aud": self.audience is not None,
                },
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected service token: {type(e).__name__}")
            raise AuthError("Invalid token format")

        if not claims_satisfied(payload, self.claims):
            raise ClaimsMismatchError()
        return payload


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization header value."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Authorization header with Bearer token required")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthError("Token is required")
    return token
