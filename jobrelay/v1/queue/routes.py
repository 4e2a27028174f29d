"""
Job enqueue API endpoints.
"""

import logging
from typing import Any

from fastapi import APIRouter, status

from jobrelay.v1.core.exceptions import (
    EnqueueFailedError,
    JobRelayException,
    create_success_response,
)
from jobrelay.v1.queue.dependencies import QueueServiceDep
from jobrelay.v1.queue.schemas import (
    JobEnqueueRequest,
    JobEnqueueResponse,
    QueueStatsResponse,
)
from jobrelay.v1.queue.service import QueueService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=dict, status_code=status.HTTP_202_ACCEPTED)
async def enqueue_job(
    job_request: JobEnqueueRequest,
    queue_service: QueueService = QueueServiceDep,
) -> dict[str, Any]:
    """Enqueue a new background job."""

    result = await queue_service.enqueue(
        task_identifier=job_request.task_identifier,
        payload=job_request.payload,
        run_at=job_request.run_at,
        max_attempts=job_request.max_attempts,
    )
    response = JobEnqueueResponse.from_result(result)

    if not result.succeeded:
        raise EnqueueFailedError(
            result.error_message or "Failed to enqueue job",
            details=response.model_dump(),
        )

    logger.info(
        "Job enqueued via API",
        extra={
            "task_identifier": job_request.task_identifier,
            "strategy": result.strategy_used,
            "attempts": result.attempts_used,
        },
    )

    return create_success_response(data=response.model_dump())


@router.get("/stats", response_model=dict)
async def get_queue_stats(
    queue_service: QueueService = QueueServiceDep,
) -> dict[str, Any]:
    """Get queue client statistics and retry configuration."""

    report = queue_service.get_stats()
    if report["status"] == "error":
        raise JobRelayException(
            f"Failed to get queue stats: {report['error']}",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    stats = QueueStatsResponse.model_validate(report)
    return create_success_response(data=stats.model_dump())
