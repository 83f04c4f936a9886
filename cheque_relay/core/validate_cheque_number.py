"""Cheque Number Validation: raw string -> ChequeIdentifier or rejection.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Rules applied in order, first failure wins:
        1. 1–16 characters after trimming surrounding whitespace
        2. ASCII digits 0-9 only (no Unicode digits, signs, points, exponents,
           control characters or NUL)
        3. not all zeros
    - The accepted value is returned verbatim: leading zeros preserved, never
      converted to a number

Design Decisions:
    - Explicit [0-9] class with re.ASCII: Python's \\d matches every Unicode
      decimal digit
    - fullmatch over match + $: $ also matches before a trailing newline
    - Trimming uses an explicit whitespace set, never bare str.strip()
"""

import re

from cheque_relay.core.domain_types import ChequeIdentifier

INVALID_INPUT = "Invalid input"

MIN_LENGTH = 1
MAX_LENGTH = 16

_ASCII_DIGITS = re.compile(r"[0-9]+", re.ASCII)

# Whitespace trimmed from both ends. str.strip() with no argument also drops
# the \x1c-\x1f separators and \x85, which must be rejected instead.
_TRIMMED = (
    " \t\n\r\v\f\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def parse_cheque_identifier(raw: object) -> ChequeIdentifier | None:
    """Return the canonical identifier, or None when the input is rejected."""
    if not isinstance(raw, str):
        return None
    value = raw.strip(_TRIMMED)
    if not MIN_LENGTH <= len(value) <= MAX_LENGTH:
        return None
    if not _ASCII_DIGITS.fullmatch(value):
        return None
    if value.strip("0") == "":
        return None
    return ChequeIdentifier(value)


def is_valid_cheque_number(raw: object) -> bool:
    return parse_cheque_identifier(raw) is not None
