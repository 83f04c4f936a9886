"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: boundary methods do IO, core functions that
      consume their results stay synchronous
"""

from typing import Protocol

from cheque_relay.core.domain_types import ChequeIdentifier, ChequeRecord
from cheque_relay.core.gateway_result import GatewayResult


class ChequeRecordSource(Protocol):
    """Contract for the read-only record lookup (internal tier)."""
    async def fetch(self, identifier: ChequeIdentifier) -> ChequeRecord | None: ...


class ChequeGateway(Protocol):
    """Contract for the authenticated call to the internal tier (public tier)."""
    async def fetch_cheque(
        self, identifier: ChequeIdentifier, request_id: str | None = None,
    ) -> GatewayResult: ...
