"""
Pytest configuration and fixtures for Staff Contact Relay tests.
"""
import os
from typing import AsyncGenerator, List

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["HASH_SECRET"] = "test-hash-secret-for-unit-tests-only"
os.environ["EMAIL_PROVIDER"] = "mock"
os.environ["RESEND_FROM"] = "relay@example.net"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient  # noqa: E402

from staff_relay.core.identifiers import derive_identifier  # noqa: E402
from staff_relay.services.directory import StaffDirectory, build_directory  # noqa: E402
from staff_relay.services.email_provider import MockEmailProvider  # noqa: E402

TEST_SECRET = "s3cret"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def staff_entries() -> List[dict]:
    """Builder input for two staff members."""
    return [
        {"firstName": "Gus", "email": "gus@example.com"},
        {"firstName": "Maria", "email": "maria@example.org"},
    ]


@pytest.fixture
def directory(staff_entries) -> StaffDirectory:
    return build_directory(staff_entries, TEST_SECRET)


@pytest.fixture
def mock_provider() -> MockEmailProvider:
    return MockEmailProvider()


@pytest.fixture
def app(directory, mock_provider):
    from staff_relay.main import create_app

    return create_app(directory=directory, provider=mock_provider)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def gus_id() -> str:
    return derive_identifier("Gus", TEST_SECRET)


@pytest.fixture
def submission(gus_id) -> dict:
    """Valid send body addressed to Gus."""
    return {
        "staffId": gus_id,
        "name": "Ann",
        "email": "ann@example.com",
        "message": "hi",
    }
