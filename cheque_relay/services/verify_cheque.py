"""Cheque Verification Service: validate -> fetch via internal tier -> compare.

Invariants:
    - Validation runs before any gateway call; rejected input never leaves this tier
    - Field reasons are surfaced under a generic "Invalid input" error
    - A not-found record is reported without computing mismatch reasons
    - Mismatch raises VerificationMismatchError (HTTP 400) with ordered reasons
    - Logs carry lengths and presence flags only, never raw values

Design Decisions:
    - Impureim sandwich: pure validators and comparator around one awaited
      gateway call; the service holds no per-request state
"""

import logging

from cheque_relay.core.compare_record import build_outcome
from cheque_relay.core.domain_types import VerificationOutcome, VerificationRequest
from cheque_relay.core.errors import (
    ErrorContext,
    InputValidationError,
    VerificationMismatchError,
)
from cheque_relay.core.gateway_result import interpret_gateway_result
from cheque_relay.core.repository_protocols import ChequeGateway
from cheque_relay.core.validate_cheque_number import parse_cheque_identifier
from cheque_relay.core.validate_fields import validate_verification_fields

logger = logging.getLogger(__name__)


def build_verification_request(
    cheque_number: str | None,
    applied_amount: str | None,
    payment_issue_date: str | None,
    context: ErrorContext | None = None,
) -> VerificationRequest:
    """Validate raw submission fields. Raises InputValidationError."""
    identifier = parse_cheque_identifier(cheque_number)
    if identifier is None:
        raise InputValidationError(context=context)

    validation = validate_verification_fields(applied_amount, payment_issue_date)
    if not validation.is_valid:
        raise InputValidationError([validation.error], context)

    return VerificationRequest(
        cheque_number=identifier,
        applied_amount=str(applied_amount).strip(),
        payment_issue_date=str(payment_issue_date).strip(),
    )


class ChequeVerificationService:
    """Runs one verification against the internal tier."""

    def __init__(self, gateway: ChequeGateway):
        self.gateway = gateway

    async def verify(
        self, request: VerificationRequest, request_id: str | None = None,
    ) -> VerificationOutcome:
        context = ErrorContext(request_id=request_id)
        result = await self.gateway.fetch_cheque(request.cheque_number, request_id)
        record = interpret_gateway_result(result, context)

        outcome = build_outcome(
            request.applied_amount, request.payment_issue_date, record,
        )
        if not outcome.matched:
            logger.info(
                "Cheque verification mismatch",
                extra={"request_id": request_id, "error_code": "VERIFICATION_FAILED"},
            )
            raise VerificationMismatchError(list(outcome.reasons), context)

        logger.info("Cheque verification successful", extra={"request_id": request_id})
        return outcome
