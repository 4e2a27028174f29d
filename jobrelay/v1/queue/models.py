"""
Value objects for the enqueue client.
"""

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from jobrelay.config.settings import Settings

MIN_DELAY = timedelta(milliseconds=100)
NO_STRATEGY = "none"


class EnqueueErrorCode(str, Enum):
    """Error taxonomy reported by strategies and the orchestrator."""

    RPC_ERROR = "RPC_ERROR"
    RPC_NULL_RESULT = "RPC_NULL_RESULT"
    DIRECT_INSERT_ERROR = "DIRECT_INSERT_ERROR"
    MAX_RETRIES_EXCEEDED = "MAX_RETRIES_EXCEEDED"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class RetryConfig(BaseModel):
    """Retry and backoff behaviour for a QueueService."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=1, description="Maximum attempts")
    initial_delay: timedelta = Field(
        default=timedelta(seconds=1), description="Delay before the second attempt"
    )
    backoff_multiplier: float = Field(
        default=2.0, gt=1.0, description="Growth factor between attempts"
    )
    max_delay: timedelta = Field(
        default=timedelta(seconds=30), description="Ceiling for any single delay"
    )
    logging_enabled: bool = Field(default=True, description="Emit lifecycle logs")

    @model_validator(mode="after")
    def _check_delays(self) -> "RetryConfig":
        if self.initial_delay < timedelta(0):
            raise ValueError("initial_delay must not be negative")
        if self.max_delay < MIN_DELAY:
            raise ValueError("max_delay must be at least 100ms")
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryConfig":
        return cls(
            max_retries=settings.queue_max_retries,
            initial_delay=timedelta(milliseconds=settings.queue_initial_delay_ms),
            backoff_multiplier=settings.queue_backoff_multiplier,
            max_delay=timedelta(milliseconds=settings.queue_max_delay_ms),
            logging_enabled=settings.queue_logging_enabled,
        )


class SubmissionOutcome(BaseModel):
    """Result of one strategy attempt."""

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    strategy_name: str
    error_message: str | None = None
    error_code: EnqueueErrorCode | None = None

    @classmethod
    def success(cls, strategy_name: str) -> "SubmissionOutcome":
        return cls(succeeded=True, strategy_name=strategy_name)

    @classmethod
    def failure(
        cls, strategy_name: str, error_code: EnqueueErrorCode, error_message: str
    ) -> "SubmissionOutcome":
        return cls(
            succeeded=False,
            strategy_name=strategy_name,
            error_code=error_code,
            error_message=error_message,
        )


class EnqueueResult(BaseModel):
    """Final result of QueueService.enqueue."""

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    attempts_used: int = Field(ge=1)
    elapsed: timedelta
    strategy_used: str = NO_STRATEGY
    error_message: str | None = None
    error_code: EnqueueErrorCode | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "EnqueueResult":
        if self.succeeded and self.strategy_used == NO_STRATEGY:
            raise ValueError("a successful result must name the strategy used")
        if not self.succeeded:
            if self.error_code is None:
                raise ValueError("a failed result must carry an error_code")
            if self.strategy_used != NO_STRATEGY:
                raise ValueError("a failed result cannot name a strategy")
        return self

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed.total_seconds() * 1000
