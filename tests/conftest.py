from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from jobrelay.config.settings import Settings
from jobrelay.main import create_app

from fakes import FakeQueueBackend, RecordingLogger, SleepRecorder


@pytest.fixture
def fake_backend():
    return FakeQueueBackend()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def test_settings():
    return Settings(environment="test", debug=False, log_level="WARNING")


@pytest.fixture
def app(test_settings, fake_backend):
    """Create a test FastAPI application backed by the fake backend."""
    app = create_app(test_settings, backend=fake_backend)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
