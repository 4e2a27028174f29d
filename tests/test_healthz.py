from fastapi.testclient import TestClient

from jobrelay.config.settings import Settings
from jobrelay.main import create_app

from fakes import FakeQueueBackend


def test_health_check_success(client: TestClient):
    """Test health check endpoint returns correct format."""
    response = client.get("/v1/healthz")

    assert response.status_code == 200

    data = response.json()
    assert data["ok"] is True
    assert "data" in data

    health_data = data["data"]
    assert health_data["ok"] is True
    assert health_data["version"] == "1.0.0"
    assert health_data["environment"] == "test"
    assert health_data["backend"]["kind"] == "postgres"
    assert health_data["backend"]["connected"] is True
    assert health_data["backend"]["response_time_ms"] >= 0


def test_health_check_response_structure(client: TestClient):
    """Test health check response envelope structure."""
    response = client.get("/v1/healthz")

    data = response.json()

    # Check response envelope structure
    required_keys = ["ok", "data", "message", "request_id", "timestamp"]
    for key in required_keys:
        assert key in data

    # Check that request ID is present in headers
    assert "X-Request-ID" in response.headers


def test_health_check_backend_down():
    """Test that an unreachable backend is reported rather than raised."""
    backend = FakeQueueBackend(ping_error=ConnectionError("connection refused"))
    app = create_app(Settings(environment="test", debug=False), backend=backend)

    with TestClient(app) as client:
        response = client.get("/v1/healthz")

    assert response.status_code == 200
    health_data = response.json()["data"]
    assert health_data["ok"] is False
    assert health_data["backend"]["connected"] is False
    assert health_data["backend"]["error"] == "connection refused"
    assert health_data["backend"]["response_time_ms"] is None


def test_backend_closed_on_shutdown(fake_backend, app):
    """Test that the lifespan releases the backend client."""
    with TestClient(app):
        assert fake_backend.closed is False

    assert fake_backend.closed is True
