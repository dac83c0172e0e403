"""Test configuration and fixtures."""

from typing import Any, AsyncGenerator, Generator, Protocol
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from src.clients.database import get_engine
from src.clients.queue import get_job_dispatcher
from src.main import app
from src.services.dispatch_service import JobDispatcher
from src.tables import metadata

TEST_JOB_ID = "job-0001"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Configure pytest-anyio to use asyncio."""
    return "asyncio"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the staging tables created."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def mock_job_dispatcher() -> MagicMock:
    """Mock job dispatcher for testing."""
    mock = MagicMock(spec=JobDispatcher)
    mock.submit.return_value = TEST_JOB_ID
    mock.queue = "fhir"
    return mock


class ClientFactory(Protocol):
    """Protocol for client factory fixture."""

    def __call__(self) -> AsyncClient: ...


@pytest.fixture
def client_factory(
    engine: Engine,
    mock_job_dispatcher: MagicMock,
) -> Generator[ClientFactory, None, None]:
    """Factory for creating test clients with mocked dependencies."""

    def _create_client() -> AsyncClient:
        app.dependency_overrides[get_engine] = lambda: engine
        app.dependency_overrides[get_job_dispatcher] = lambda: mock_job_dispatcher

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


def make_patient(**overrides: Any) -> dict[str, Any]:
    """A Patient resource that passes every staging rule."""
    patient: dict[str, Any] = {
        "resourceType": "Patient",
        "id": "P1",
        "gender": "female",
        "birthDate": "1990",
        "managingOrganization": {"reference": "Organization/F1"},
        "address": [{"country": "Uganda", "district": "Kampala"}],
    }
    patient.update(overrides)
    return patient


def make_encounter(**overrides: Any) -> dict[str, Any]:
    """An Encounter resource that passes every staging rule."""
    encounter: dict[str, Any] = {
        "resourceType": "Encounter",
        "id": "E1",
        "type": [{"coding": [{"code": "ANC"}]}],
        "period": {"start": "2024-01-01"},
        "subject": {"reference": "Patient/P1"},
        "serviceProvider": {"reference": "Organization/F1"},
    }
    encounter.update(overrides)
    return encounter


def make_observation(**overrides: Any) -> dict[str, Any]:
    """An Observation resource that passes every staging rule."""
    observation: dict[str, Any] = {
        "resourceType": "Observation",
        "id": "O1",
        "encounter": {"reference": "Encounter/E1"},
        "subject": {"reference": "Patient/P1"},
        "code": {"coding": [{"display": "Weight", "code": "w1"}, {"code": "c2"}]},
        "valueQuantity": {"value": 60},
        "effectiveDateTime": "2024-01-01T10:00:00+03:00",
    }
    observation.update(overrides)
    return observation


@pytest.fixture
def sample_bundle() -> dict[str, Any]:
    """Bundle with one patient, one encounter and one observation."""
    return {
        "resourceType": "Bundle",
        "type": "collection",
        "entry": [
            {"resource": make_patient()},
            {"resource": make_encounter()},
            {"resource": make_observation()},
        ],
    }
