"""API test fixtures: isolated public and internal apps behind httpx ASGITransport.

Invariants:
    - Every test builds its own app: admission counters never leak between tests
    - No network and no database: the gateway and record source are fakes
    - Time is faked: slow-down delays are recorded, never slept

Design Decisions:
    - raise_app_exceptions=False: unhandled errors are asserted as 500 responses
"""

import pytest
from httpx import ASGITransport, AsyncClient

from cheque_relay.core.errors import DatabaseError
from cheque_relay.core.gateway_result import GatewaySuccess
from cheque_relay.infrastructure.credentials import TokenSigner
from cheque_relay.internal_main import create_app as create_internal_app
from cheque_relay.public_main import create_app as create_public_app


class SpyRecordSource:
    """ChequeRecordSource that records every identifier it is asked for."""

    def __init__(self, record=None, error: DatabaseError | None = None):
        self.record = record
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, identifier):
        self.calls.append(identifier)
        if self.error is not None:
            raise self.error
        return self.record


@pytest.fixture
def found_result(sample_record):
    return GatewaySuccess(200, {"success": True, "data": sample_record.to_wire()})


@pytest.fixture
def public_app(public_settings, fake_gateway, clock, sleep):
    return create_public_app(public_settings, gateway=fake_gateway, clock=clock, sleep=sleep)


@pytest.fixture
async def public_client(public_app):
    async with AsyncClient(
        transport=ASGITransport(app=public_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def record_source():
    return SpyRecordSource()


@pytest.fixture
def internal_app(internal_settings, record_source, clock):
    return create_internal_app(internal_settings, record_source=record_source, clock=clock)


@pytest.fixture
async def internal_client(internal_app):
    async with AsyncClient(
        transport=ASGITransport(app=internal_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def auth_headers(secret):
    token = TokenSigner(secret=secret).mint()
    return {"Authorization": f"Bearer {token}"}
