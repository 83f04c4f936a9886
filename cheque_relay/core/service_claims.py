"""Service Claims: the fixed claim set that authorizes public-tier calls.

Invariants:
    - Exactly one claim set is ever issued and accepted
    - Claims compared field by field with ==; a missing claim never matches
"""

from dataclasses import dataclass, fields

SERVICE_SUBJECT = "cheque-backend-service"
SERVICE_PURPOSE = "cheque-api-access"


@dataclass(frozen=True)
class RequiredClaims:
    """Claims every inter-tier credential must carry."""
    purpose: str = SERVICE_PURPOSE
    sub: str = SERVICE_SUBJECT

    def as_payload(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


SERVICE_CLAIMS = RequiredClaims()


def claims_satisfied(payload: dict, required: RequiredClaims = SERVICE_CLAIMS) -> bool:
    """True when the decoded payload carries every required claim unchanged."""
    return (
        payload.get("purpose") == required.purpose
        and payload.get("sub") == required.sub
    )
