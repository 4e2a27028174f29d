import time
from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from jobrelay.config.settings import Settings, SettingsDep
from jobrelay.v1.core.exceptions import create_success_response
from jobrelay.v1.queue.backends import QueueBackend
from jobrelay.v1.queue.dependencies import QueueBackendDep

router = APIRouter()


class BackendHealth(BaseModel):
    """Queue backend health status."""

    kind: str
    connected: bool
    response_time_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health response with backend status."""

    ok: bool
    version: str
    environment: str
    timestamp: str
    backend: BackendHealth


@router.get("/healthz", response_model=dict)
async def health_check(
    settings: Settings = SettingsDep, backend: QueueBackend = QueueBackendDep
):
    """Health check endpoint with queue backend status."""

    backend_health = await _check_backend_health(backend)

    health = HealthResponse(
        ok=backend_health.connected,
        version=settings.version,
        environment=settings.environment,
        timestamp=datetime.now(UTC).isoformat(),
        backend=backend_health,
    )

    return create_success_response(data=health.model_dump())


async def _check_backend_health(backend: QueueBackend) -> BackendHealth:
    """Check backend connectivity and response time."""
    start = time.monotonic()

    try:
        await backend.ping()
    except Exception as e:
        return BackendHealth(kind=backend.kind, connected=False, error=str(e))

    response_time_ms = (time.monotonic() - start) * 1000
    return BackendHealth(
        kind=backend.kind, connected=True, response_time_ms=round(response_time_ms, 2)
    )
