"""Cheque Lookup Route: internal GET /api/v1/cheque/{cheque_number}.

Invariants:
    - Order: admission guard -> credential check -> identifier validation -> fetch
    - Only a validated ChequeIdentifier reaches the record source
    - Not found -> 404 envelope; database failure -> 503 envelope (DatabaseError)
    - An empty path segment never matches this route (routing-level 404)
"""

import logging

from fastapi import APIRouter, Depends, Request

from cheque_relay.api.dependencies import (
    admission_guard,
    get_record_source,
    request_id_of,
    require_service_credential,
)
from cheque_relay.core.domain_types import RouteClass
from cheque_relay.core.errors import ChequeNotFoundError, ErrorContext, InputValidationError
from cheque_relay.core.repository_protocols import ChequeRecordSource
from cheque_relay.core.validate_cheque_number import parse_cheque_identifier
from cheque_relay.schemas.cheque import ChequeData, ChequeEnvelope

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/cheque",
    tags=["cheque"],
    dependencies=[
        Depends(admission_guard(RouteClass.INTERNAL_LOOKUP)),
        Depends(require_service_credential),
    ],
)


@router.get("/{cheque_number}", response_model=ChequeEnvelope, response_model_exclude_none=True)
async def get_cheque(
    cheque_number: str,
    request: Request,
    source: ChequeRecordSource = Depends(get_record_source),
):
    """Look up one cheque record by its number."""
    request_id = request_id_of(request)
    context = ErrorContext(request_id=request_id)
    identifier = parse_cheque_identifier(cheque_number)
    if identifier is None:
        raise InputValidationError(context=context)

    logger.info(
        "Received cheque lookup request",
        extra={
            "request_id": request_id,
            "cheque_number_length": len(identifier),
        },
    )
    record = await source.fetch(identifier)
    if record is None:
        raise ChequeNotFoundError(context)
    return ChequeEnvelope(success=True, data=ChequeData(**record.to_wire()))
