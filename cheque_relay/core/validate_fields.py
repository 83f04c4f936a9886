"""Verification Field Validation: applied amount and payment issue date.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Raw strings are shape-checked before any numeric/date coercion
    - An unparseable value always yields a rejection, never a default
    - No upper bound on the amount at this layer

Design Decisions:
    - Amount shape checked with an ASCII decimal-literal regex before float():
      float() alone accepts "nan", "inf", "1_000" and surrounding whitespace
    - Dates parsed with datetime.fromisoformat: date-only and date-time forms,
      with or without an offset / trailing Z
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

MISSING_FIELDS = (
    "All verification fields are required (appliedAmount, paymentIssueDate)"
)
INVALID_AMOUNT = "Cheque amount must be a valid positive number"
INVALID_DATE = "Payment issue date must be a valid date"

_DECIMAL_LITERAL = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII,
)


@dataclass(frozen=True)
class FieldValidation:
    """Outcome of validate_verification_fields."""
    is_valid: bool
    error: str | None = None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_amount(value: object) -> Decimal | None:
    """Parse a currency amount. Returns None when the value is not a finite number.

    Accepts str, int, float and Decimal; bool is rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))
    text = _as_text(value)
    if not _DECIMAL_LITERAL.fullmatch(text):
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite() or not math.isfinite(float(amount)):
        return None
    return amount


def parse_issue_date(value: object) -> date | None:
    """Normalize a date-ish value to its calendar day in UTC.

    Aware datetimes are converted to UTC first; naive datetimes and
    date-only values are taken as already being UTC.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    else:
        text = _as_text(value)
        if not text:
            return None
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def validate_verification_fields(
    applied_amount: object, payment_issue_date: object,
) -> FieldValidation:
    """Check presence, amount shape/sign, then date validity. First failure wins."""
    if not _as_text(applied_amount) or not _as_text(payment_issue_date):
        return FieldValidation(False, MISSING_FIELDS)

    amount = parse_amount(applied_amount)
    if amount is None or amount < 0:
        return FieldValidation(False, INVALID_AMOUNT)

    if parse_issue_date(payment_issue_date) is None:
        return FieldValidation(False, INVALID_DATE)

    return FieldValidation(True)
