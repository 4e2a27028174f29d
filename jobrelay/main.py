from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from jobrelay.config.logging import setup_logging
from jobrelay.config.settings import Settings, get_settings
from jobrelay.v1.core.exceptions import (
    JobRelayException,
    RequestContextMiddleware,
    general_exception_handler,
    http_exception_handler,
    job_relay_exception_handler,
)
from jobrelay.v1.healthz import router as health_router
from jobrelay.v1.queue.backends import QueueBackend, create_backend
from jobrelay.v1.queue.registry_init import create_strategy_registry
from jobrelay.v1.queue.routes import router as jobs_router
from jobrelay.v1.queue.service import QueueService


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.queue_backend.close()


def create_app(
    settings: Settings | None = None, backend: QueueBackend | None = None
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    # Initialize structured logging
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Retrying enqueue client for Postgres-backed work queues",
        version=settings.version,
        debug=settings.debug,
        # All endpoints will be under /v1/ prefix
        openapi_url="/v1/openapi.json" if settings.debug else None,
        docs_url="/v1/docs" if settings.debug else None,
        redoc_url="/v1/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # Build the backend client and queue service once per application
    strategy_registry = create_strategy_registry()
    if settings.environment != "development":
        strategy_registry.freeze()

    app.state.queue_backend = backend or create_backend(settings)
    app.state.queue_service = QueueService.from_settings(
        settings, app.state.queue_backend, registry=strategy_registry
    )

    # Add middleware
    app.add_middleware(RequestContextMiddleware)

    # Add CORS middleware for development
    if settings.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Add exception handlers
    app.add_exception_handler(JobRelayException, job_relay_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers with /v1 prefix
    app.include_router(health_router, prefix="/v1", tags=["health"])
    app.include_router(jobs_router, prefix="/v1")

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jobrelay.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
