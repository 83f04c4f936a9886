"""Cheque Verification Route: public POST /api/cheque/verify.

Invariants:
    - General then verification admission guards run before the handler
    - The handler only validates, delegates to ChequeVerificationService, and
      shapes the success body; every failure is a ChequeRelayError
"""

import logging

from fastapi import APIRouter, Depends, Request

from cheque_relay.api.dependencies import (
    admission_guard,
    get_verification_service,
    request_id_of,
)
from cheque_relay.core.domain_types import RouteClass
from cheque_relay.core.errors import ErrorContext
from cheque_relay.schemas.cheque import ChequeData, VerifyChequeRequest, VerifyChequeResponse
from cheque_relay.services.verify_cheque import (
    ChequeVerificationService,
    build_verification_request,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/cheque",
    tags=["cheque"],
    dependencies=[Depends(admission_guard(RouteClass.GENERAL))],
)


@router.post(
    "/verify",
    response_model=VerifyChequeResponse,
    dependencies=[Depends(admission_guard(RouteClass.VERIFICATION))],
)
async def verify_cheque(
    body: VerifyChequeRequest,
    request: Request,
    service: ChequeVerificationService = Depends(get_verification_service),
):
    """Check submitted cheque details against the government record."""
    request_id = request_id_of(request)
    logger.info(
        "Received cheque verification request",
        extra={
            "request_id": request_id,
            "cheque_number_length": len(body.cheque_number or ""),
            "has_amount": bool(body.applied_amount),
            "has_date": bool(body.payment_issue_date),
        },
    )
    verification = build_verification_request(
        body.cheque_number,
        body.applied_amount,
        body.payment_issue_date,
        ErrorContext(request_id=request_id),
    )
    outcome = await service.verify(verification, request_id)
    return VerifyChequeResponse(data=ChequeData(**outcome.record.to_wire()))
