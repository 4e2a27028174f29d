from fastapi import Depends, Request

from jobrelay.v1.queue.backends import QueueBackend
from jobrelay.v1.queue.service import QueueService


def get_queue_service(request: Request) -> QueueService:
    """Return the QueueService built for this application."""
    return request.app.state.queue_service


def get_queue_backend(request: Request) -> QueueBackend:
    """Return the backend client built for this application."""
    return request.app.state.queue_backend


# Convenience aliases for dependency injection
QueueServiceDep = Depends(get_queue_service)
QueueBackendDep = Depends(get_queue_backend)
