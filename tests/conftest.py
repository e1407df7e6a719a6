"""Test configuration and fixtures."""

from datetime import date, timedelta
from typing import Any, AsyncGenerator, Generator, Protocol
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from streetreach.clients.record_store import get_record_store
from streetreach.core.auth import AuthenticatedUser, get_current_user, require_admin
from streetreach.main import app
from streetreach.matching import PersonRecord
from streetreach.services.record_store import RecordStore

TEST_USER_ID = "00000000-0000-0000-0000-000000000001"
TEST_ADMIN_ID = "00000000-0000-0000-0000-000000000002"


def make_person(
    person_id: str,
    first_name: str,
    last_name: str | None = None,
    **fields: Any,
) -> PersonRecord:
    """Build a PersonRecord with only the fields a test cares about."""
    return PersonRecord(
        id=person_id, first_name=first_name, last_name=last_name, **fields
    )


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Configure pytest-anyio to use asyncio."""
    return "asyncio"


@pytest.fixture
def sample_population() -> list[PersonRecord]:
    """A small population in creation order."""
    today = date.today()
    return [
        make_person(
            "p1",
            "Maria",
            "Garcia",
            middle_name="Elena",
            client_id="CL-0001",
            date_of_birth=date(1975, 3, 14),
            last_contact=today - timedelta(days=10),
            contact_count=4,
        ),
        make_person(
            "p2",
            "Lauren",
            "White",
            client_id="CL-0002",
            last_contact=today - timedelta(days=200),
            contact_count=1,
        ),
        make_person("p3", "Bob", "Jones"),
        make_person("p4", "Bob", None, nickname="Bobby"),
        make_person("p5", "Bob", None),
        make_person(
            "p6",
            "Steven",
            "Smith",
            client_id="CL-0006",
            exit_date=today - timedelta(days=30),
            exit_destination="Deceased",
        ),
    ]


@pytest.fixture
def mock_record_store(sample_population: list[PersonRecord]) -> AsyncMock:
    """Mock record store for testing."""
    mock = AsyncMock(spec=RecordStore)
    mock.fetch_persons.return_value = sample_population
    mock.health_check.return_value = True
    mock.get_user_role.return_value = "field_worker"
    return mock


@pytest.fixture
def mock_authenticated_user() -> AuthenticatedUser:
    """Mock signed-in field worker for testing."""
    return AuthenticatedUser(
        user_id=TEST_USER_ID,
        email="worker@example.org",
        raw_token="test-access-token",
    )


@pytest.fixture
def mock_admin_user() -> AuthenticatedUser:
    """Mock signed-in admin for testing."""
    return AuthenticatedUser(
        user_id=TEST_ADMIN_ID,
        email="admin@example.org",
        role="admin",
        raw_token="test-admin-token",
    )


class ClientFactory(Protocol):
    """Protocol for client factory fixture."""

    def __call__(self, admin: bool = False) -> AsyncClient: ...


@pytest.fixture
def client_factory(
    mock_record_store: AsyncMock,
    mock_authenticated_user: AuthenticatedUser,
    mock_admin_user: AuthenticatedUser,
) -> Generator[ClientFactory, None, None]:
    """Factory for creating test clients with mocked dependencies."""

    def _create_client(admin: bool = False) -> AsyncClient:
        user = mock_admin_user if admin else mock_authenticated_user
        app.dependency_overrides[get_record_store] = lambda: mock_record_store
        app.dependency_overrides[get_current_user] = lambda: user
        if admin:
            app.dependency_overrides[require_admin] = lambda: mock_admin_user

        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://testserver")

    yield _create_client

    app.dependency_overrides.clear()


@pytest.fixture
async def client(
    client_factory: ClientFactory,
) -> AsyncGenerator[AsyncClient, None]:
    """Async client for testing endpoints."""
    async with client_factory() as c:
        yield c
