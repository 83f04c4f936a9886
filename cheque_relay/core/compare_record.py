"""Record Comparison: does a submission match the authoritative record?

Invariants:
    - All functions are PURE and idempotent: same inputs, same reasons
    - Amount and date are checked independently; reasons are ordered
      amount first, then date; 0, 1 or 2 entries
    - Amounts match when |submitted - recorded| <= 0.01 (absolute, not a percentage)
    - Dates match on UTC calendar day (time-of-day and offset stripped)
    - A side that fails to parse is a mismatch for that field, never a match

Design Decisions:
    - Decimal arithmetic for the epsilon check: the 0.01 boundary is exact
      (1000.50 vs 1000.51 matches, 0.07 vs 0.08 matches)
"""

from decimal import Decimal

from cheque_relay.core.domain_types import ChequeRecord, VerificationOutcome
from cheque_relay.core.validate_fields import parse_amount, parse_issue_date

AMOUNT_EPSILON = Decimal("0.01")

AMOUNT_MISMATCH = "Cheque amount does not match"
DATE_MISMATCH = "Payment issue date does not match"


def amounts_match(submitted: object, recorded: object) -> bool:
    a = parse_amount(submitted)
    b = parse_amount(recorded)
    if a is None or b is None:
        return False
    return abs(a - b) <= AMOUNT_EPSILON


def dates_match(submitted: object, recorded: object) -> bool:
    a = parse_issue_date(submitted)
    b = parse_issue_date(recorded)
    if a is None or b is None:
        return False
    return a == b


def compare_record(
    applied_amount: str, payment_issue_date: str, record: ChequeRecord,
) -> list[str]:
    """Return mismatch reasons; an empty list is a full match."""
    reasons: list[str] = []
    if not amounts_match(applied_amount, record.applied_amount):
        reasons.append(AMOUNT_MISMATCH)
    if not dates_match(payment_issue_date, record.payment_issue_date):
        reasons.append(DATE_MISMATCH)
    return reasons


def build_outcome(
    applied_amount: str, payment_issue_date: str, record: ChequeRecord,
) -> VerificationOutcome:
    reasons = compare_record(applied_amount, payment_issue_date, record)
    return VerificationOutcome(
        matched=not reasons, reasons=tuple(reasons), record=record,
    )
