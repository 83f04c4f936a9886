"""Root conftest: shared test configuration and fakes."""

import os

import pytest

from cheque_relay.config import InternalSettings, PublicSettings
from cheque_relay.core.domain_types import ChequeRecord

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-use"

# Ensure tests never pick up real credentials or a real database
os.environ.setdefault("JWT_SECRET", TEST_SECRET)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")


class FakeClock:
    """Monotonic clock driven by the test."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep that records requested delays instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def public_settings():
    return PublicSettings(
        jwt_secret=TEST_SECRET,
        api_url="http://internal.test",
        frontend_url="http://frontend.test",
    )


@pytest.fixture
def internal_settings():
    return InternalSettings(
        jwt_secret=TEST_SECRET,
        jwt_issuer="cheque-backend",
        jwt_audience="cheque-api",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def sample_record():
    return ChequeRecord(
        status="Issued",
        cheque_number="0012345678",
        payment_issue_date="2024-01-15",
        applied_amount=1000.50,
    )


class FakeGateway:
    """ChequeGateway returning a canned result and recording calls."""

    def __init__(self, result=None):
        self.result = result
        self.calls: list[tuple[str, str | None]] = []

    async def fetch_cheque(self, identifier, request_id=None):
        self.calls.append((identifier, request_id))
        return self.result


@pytest.fixture
def fake_gateway():
    return FakeGateway()
