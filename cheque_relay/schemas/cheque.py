"""Cheque Schemas: Pydantic models for the public and internal JSON contracts.

Invariants:
    - VerifyChequeRequest fields are strings (or absent); numbers are rejected
      so a 16-digit cheque number can never be coerced through a float
    - Semantic validation (digits, amount, date) happens in core/, not here
    - Response data uses camelCase keys on both tiers
"""

from pydantic import BaseModel, ConfigDict, Field


class VerifyChequeRequest(BaseModel):
    """Public POST /api/cheque/verify body."""
    model_config = ConfigDict(populate_by_name=True, str_max_length=1024)

    cheque_number: str | None = Field(None, alias="chequeNumber")
    applied_amount: str | None = Field(None, alias="appliedAmount")
    payment_issue_date: str | None = Field(None, alias="paymentIssueDate")


class ChequeData(BaseModel):
    """Record as exchanged between tiers and returned to the citizen."""
    chequeStatus: str
    chequeNumber: str
    paymentIssueDate: str
    appliedAmount: float


class ChequeEnvelope(BaseModel):
    """Internal tier response envelope."""
    success: bool
    data: ChequeData | None = None
    error: str | None = None


class VerifyChequeResponse(BaseModel):
    """Public success body."""
    success: bool = True
    data: ChequeData
    message: str = "Cheque verification successful"
