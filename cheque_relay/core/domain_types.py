"""Domain Types: rich types that replace bare primitives across the pipeline.

Invariants:
    - ChequeIdentifier wraps str: never int, never float (16 digits exceed
      float precision)
    - ChequeRecord is authoritative ground truth: frozen, never mutated
    - VerificationOutcome is derived per request and never stored
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType for the identifier: zero runtime cost, full type-checker support
    - Frozen dataclasses for records and outcomes: immutable by construction
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ChequeIdentifier = NewType("ChequeIdentifier", str)   # 1–16 ASCII digits


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class VerificationRequest:
    """One citizen submission. Amount and date stay raw until validated."""
    cheque_number: ChequeIdentifier
    applied_amount: str
    payment_issue_date: str


@dataclass(frozen=True)
class ChequeRecord:
    """A cheque row as held by the record store."""
    status: str
    cheque_number: str
    payment_issue_date: date | datetime | str
    applied_amount: Decimal | float

    def to_wire(self) -> dict:
        """Serialize with the camelCase keys both tiers exchange."""
        issue_date = self.payment_issue_date
        if isinstance(issue_date, (date, datetime)):
            issue_date = issue_date.isoformat()
        amount = self.applied_amount
        if isinstance(amount, Decimal):
            amount = float(amount)
        return {
            "chequeStatus": self.status,
            "chequeNumber": self.cheque_number,
            "paymentIssueDate": issue_date,
            "appliedAmount": amount,
        }

    @classmethod
    def from_wire(cls, data: dict) -> "ChequeRecord":
        """Build from an internal-tier envelope's data object.

        Raises KeyError when a field is missing.
        """
        return cls(
            status=str(data["chequeStatus"]),
            cheque_number=str(data["chequeNumber"]),
            payment_issue_date=data["paymentIssueDate"],
            applied_amount=data["appliedAmount"],
        )


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of comparing a submission against a fetched record."""
    matched: bool
    reasons: tuple[str, ...]
    record: ChequeRecord | None = None


# ─── Enums ───────────────────────────────────────────────────────

class RouteClass(str, Enum):
    """Admission-control route classes, each with its own window."""
    GENERAL = "general"
    VERIFICATION = "verification"
    HEALTH = "health"
    INTERNAL_LOOKUP = "internal_lookup"


class AdmissionState(str, Enum):
    """Per-client position inside the current window."""
    NORMAL = "normal"
    SOFT_THRESHOLD = "soft_threshold"
    HARD_LIMIT = "hard_limit"
