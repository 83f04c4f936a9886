"""Cheque Verification Service: tests for validate -> fetch -> compare.

Tests cover:
    - Invalid cheque numbers / fields raise InputValidationError before any gateway call
    - Field errors surface as details; number errors carry no details
    - Matching submission returns a matched outcome with the record
    - Mismatch raises VerificationMismatchError with ordered reasons
    - Not found / timeout propagate as typed errors
    - Request ID forwarded to the gateway
"""

import pytest

from cheque_relay.core.errors import (
    ChequeNotFoundError,
    InputValidationError,
    UpstreamTimeoutError,
    VerificationMismatchError,
)
from cheque_relay.core.gateway_result import GatewaySuccess, GatewayTimeout
from cheque_relay.core.validate_fields import INVALID_DATE, MISSING_FIELDS
from cheque_relay.services.verify_cheque import (
    ChequeVerificationService,
    build_verification_request,
)

_FOUND = GatewaySuccess(200, {
    "success": True,
    "data": {
        "chequeStatus": "Issued",
        "chequeNumber": "0012345678",
        "paymentIssueDate": "2024-01-15",
        "appliedAmount": 1000.5,
    },
})


# ─── build_verification_request ──────────────────────────────────

def test_build_request_trims_and_keeps_raw_values():
    request = build_verification_request(" 0012345678 ", " 1000.50 ", "2024-01-15")
    assert request.cheque_number == "0012345678"
    assert request.applied_amount == "1000.50"
    assert request.payment_issue_date == "2024-01-15"


def test_invalid_number_has_no_details():
    with pytest.raises(InputValidationError) as exc_info:
        build_verification_request("12ab", "100", "2024-01-15")
    assert "details" not in exc_info.value.to_response()


def test_missing_fields_reported_as_details():
    with pytest.raises(InputValidationError) as exc_info:
        build_verification_request("12345678", None, "2024-01-15")
    assert exc_info.value.details == [MISSING_FIELDS]


def test_invalid_date_reported_as_details():
    with pytest.raises(InputValidationError) as exc_info:
        build_verification_request("12345678", "100", "2024-02-30")
    assert exc_info.value.details == [INVALID_DATE]


# ─── ChequeVerificationService ───────────────────────────────────

async def test_matching_submission_returns_outcome(fake_gateway):
    fake_gateway.result = _FOUND
    service = ChequeVerificationService(fake_gateway)
    request = build_verification_request("0012345678", "1000.50", "2024-01-15")

    outcome = await service.verify(request, request_id="req-7")

    assert outcome.matched
    assert outcome.record.cheque_number == "0012345678"
    assert fake_gateway.calls == [("0012345678", "req-7")]


async def test_amount_within_tolerance_matches(fake_gateway):
    fake_gateway.result = _FOUND
    request = build_verification_request("0012345678", "1000.51", "2024-01-15T20:00:00Z")
    outcome = await ChequeVerificationService(fake_gateway).verify(request)
    assert outcome.matched


async def test_mismatch_raises_with_reasons(fake_gateway):
    fake_gateway.result = _FOUND
    request = build_verification_request("0012345678", "999.00", "2024-01-16")
    with pytest.raises(VerificationMismatchError) as exc_info:
        await ChequeVerificationService(fake_gateway).verify(request)
    assert exc_info.value.reasons == [
        "Cheque amount does not match",
        "Payment issue date does not match",
    ]
    assert exc_info.value.http_status == 400


async def test_not_found_propagates(fake_gateway):
    fake_gateway.result = GatewaySuccess(404, {"success": False, "error": "Cheque not found"})
    request = build_verification_request("12345678", "100", "2024-01-15")
    with pytest.raises(ChequeNotFoundError):
        await ChequeVerificationService(fake_gateway).verify(request)


async def test_timeout_propagates_with_request_id(fake_gateway):
    fake_gateway.result = GatewayTimeout()
    request = build_verification_request("12345678", "100", "2024-01-15")
    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await ChequeVerificationService(fake_gateway).verify(request, request_id="req-9")
    assert exc_info.value.context.request_id == "req-9"
