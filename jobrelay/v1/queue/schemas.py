"""
Pydantic schemas for the jobs API.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from jobrelay.v1.queue.models import EnqueueResult


class JobEnqueueRequest(BaseModel):
    """Schema for enqueueing jobs via API."""

    task_identifier: str = Field(
        ..., min_length=1, description="Backend task handler name"
    )
    payload: dict[str, Any] | None = Field(default=None, description="Job payload")
    run_at: datetime | None = Field(default=None, description="Scheduled run time")
    max_attempts: int | None = Field(
        default=None, ge=1, description="Execution attempts hint for the backend"
    )


class JobEnqueueResponse(BaseModel):
    """Schema for job enqueue response."""

    succeeded: bool
    attempts_used: int
    elapsed_ms: float
    strategy_used: str
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def from_result(cls, result: EnqueueResult) -> "JobEnqueueResponse":
        return cls(
            succeeded=result.succeeded,
            attempts_used=result.attempts_used,
            elapsed_ms=round(result.elapsed_ms, 2),
            strategy_used=result.strategy_used,
            error_code=result.error_code.value if result.error_code else None,
            error_message=result.error_message,
        )


class QueueConfigResponse(BaseModel):
    """Effective retry configuration."""

    max_retries: int
    initial_delay_ms: int
    max_delay_ms: int
    backoff_multiplier: float


class QueueStatsResponse(BaseModel):
    """Schema for queue client statistics."""

    status: str
    timestamp: str
    config: QueueConfigResponse
    strategies: list[str]
