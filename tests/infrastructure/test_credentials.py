"""Inter-tier Credentials: tests for HS256 minting and verification.

Tests cover:
    - Minted tokens verify and carry iss, aud, sub, purpose, iat, exp
    - Expired tokens -> "Token has expired"; leeway tolerates small skew
    - Wrong secret / garbage / alg=none -> "Invalid token format"
    - Wrong issuer or audience rejected only when configured
    - Wrong claims -> ClaimsMismatchError (403)
    - Missing secret -> AuthConfigError (500)
    - bearer_token header parsing
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from cheque_relay.core.errors import AuthConfigError, AuthError, ClaimsMismatchError
from cheque_relay.core.service_claims import RequiredClaims
from cheque_relay.infrastructure.credentials import (
    TokenSigner,
    TokenVerifier,
    bearer_token,
)


@pytest.fixture
def signer(secret):
    return TokenSigner(secret=secret)


@pytest.fixture
def verifier(secret):
    return TokenVerifier(secret=secret, issuer="cheque-backend", audience="cheque-api")


# ─── mint / verify ───────────────────────────────────────────────

def test_minted_token_round_trips(signer, verifier):
    payload = verifier.verify(signer.mint())
    assert payload["sub"] == "cheque-backend-service"
    assert payload["purpose"] == "cheque-api-access"
    assert payload["iss"] == "cheque-backend"
    assert payload["aud"] == "cheque-api"
    assert payload["exp"] - payload["iat"] == 120


def test_each_mint_is_fresh(signer):
    first = signer.mint(datetime(2024, 1, 1, tzinfo=timezone.utc))
    second = signer.mint(datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc))
    assert first != second


def test_verifier_without_iss_aud_accepts_any(signer, secret):
    assert TokenVerifier(secret=secret).verify(signer.mint())["sub"] == "cheque-backend-service"


# ─── expiry ──────────────────────────────────────────────────────

def test_expired_token_rejected(signer, verifier):
    past = datetime.now(timezone.utc) - timedelta(minutes=10)
    with pytest.raises(AuthError) as exc_info:
        verifier.verify(signer.mint(now=past))
    assert exc_info.value.message == "Token has expired"
    assert exc_info.value.http_status == 401


def test_leeway_tolerates_small_clock_skew(signer, verifier):
    # Expired 5s ago, inside the 10s tolerance
    issued = datetime.now(timezone.utc) - timedelta(seconds=125)
    assert verifier.verify(signer.mint(now=issued))


def test_token_without_exp_rejected(secret, verifier):
    token = jwt.encode({"purpose": "cheque-api-access", "sub": "cheque-backend-service",
                        "iss": "cheque-backend", "aud": "cheque-api"}, secret, algorithm="HS256")
    with pytest.raises(AuthError) as exc_info:
        verifier.verify(token)
    assert exc_info.value.message == "Invalid token format"


# ─── bad tokens ──────────────────────────────────────────────────

def test_wrong_secret_rejected(verifier):
    token = TokenSigner(secret="another-secret-that-is-long-enough-for-hs256").mint()
    with pytest.raises(AuthError) as exc_info:
        verifier.verify(token)
    assert exc_info.value.message == "Invalid token format"


def test_garbage_token_rejected(verifier):
    with pytest.raises(AuthError):
        verifier.verify("not.a.jwt")


def test_unsigned_token_rejected(verifier):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"purpose": "cheque-api-access", "sub": "cheque-backend-service",
         "iss": "cheque-backend", "aud": "cheque-api", "exp": now + timedelta(minutes=1)},
        None, algorithm="none",
    )
    with pytest.raises(AuthError):
        verifier.verify(token)


def test_wrong_issuer_rejected(secret, verifier):
    token = TokenSigner(secret=secret, issuer="someone-else").mint()
    with pytest.raises(AuthError):
        verifier.verify(token)


def test_wrong_audience_rejected(secret, verifier):
    token = TokenSigner(secret=secret, audience="another-api").mint()
    with pytest.raises(AuthError):
        verifier.verify(token)


def test_wrong_claims_forbidden(secret, verifier):
    token = TokenSigner(secret=secret, claims=RequiredClaims(purpose="admin")).mint()
    with pytest.raises(ClaimsMismatchError) as exc_info:
        verifier.verify(token)
    assert exc_info.value.http_status == 403


def test_missing_secret_is_config_error(signer):
    with pytest.raises(AuthConfigError):
        TokenVerifier(secret=None).verify(signer.mint())


# ─── bearer_token ────────────────────────────────────────────────

def test_bearer_token_extracts_value():
    assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "bearer abc", "Token abc"])
def test_bearer_token_requires_scheme(header):
    with pytest.raises(AuthError) as exc_info:
        bearer_token(header)
    assert exc_info.value.message == "Authorization header with Bearer token required"


def test_bearer_token_requires_value():
    with pytest.raises(AuthError) as exc_info:
        bearer_token("Bearer    ")
    assert exc_info.value.message == "Token is required"
