"""
Queue service for submitting jobs to the backend work queue.
"""

import asyncio
import contextlib
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from jobrelay.config.logging import get_logger
from jobrelay.config.settings import Settings
from jobrelay.v1.core.registries import StrategyRegistry
from jobrelay.v1.queue.backends import QueueBackend
from jobrelay.v1.queue.backoff import calculate_delay
from jobrelay.v1.queue.models import (
    EnqueueErrorCode,
    EnqueueResult,
    RetryConfig,
    SubmissionOutcome,
)
from jobrelay.v1.queue.registry_init import create_strategy_registry
from jobrelay.v1.queue.strategies import SubmissionStrategy

Sleep = Callable[[float], Awaitable[Any]]


class QueueService:
    """
    Enqueue client with ordered fallback strategies and bounded retries.

    Every attempt tries each strategy in order until one succeeds. When all of
    them fail the service waits with jittered exponential backoff and tries
    again, up to ``RetryConfig.max_retries`` attempts. ``enqueue`` always
    returns an EnqueueResult; strategy failures never reach the caller as
    exceptions.
    """

    def __init__(
        self,
        strategies: Sequence[SubmissionStrategy],
        config: RetryConfig | None = None,
        logger: Any | None = None,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if not strategies:
            raise ValueError("QueueService needs at least one submission strategy")

        self.strategies = tuple(strategies)
        self.config = config or RetryConfig()
        self.logger = logger or get_logger(__name__)
        self.rng = rng or random.Random()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        backend: QueueBackend,
        registry: StrategyRegistry | None = None,
        **kwargs: Any,
    ) -> "QueueService":
        """Build the strategy chain named by QUEUE_STRATEGIES."""
        registry = registry or create_strategy_registry()
        strategies = [
            registry.get(name)(backend, settings) for name in settings.queue_strategies
        ]
        return cls(strategies, RetryConfig.from_settings(settings), **kwargs)

    async def enqueue(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None = None,
        run_at: datetime | None = None,
        max_attempts: int | None = None,
    ) -> EnqueueResult:
        """
        Enqueue a job, retrying through every strategy until one succeeds.

        Args:
            task_identifier: Name of the backend task handler
            payload: Job parameters, defaults to an empty object
            run_at: Earliest time the backend should run the job
            max_attempts: Execution attempts hint passed to the RPC

        Returns:
            EnqueueResult describing the outcome
        """
        if not task_identifier:
            raise ValueError("task_identifier is required for job enqueueing")

        started = time.monotonic()
        max_retries = self.config.max_retries
        log = {"task_identifier": task_identifier}

        self._log("info", "Starting enqueue", **log)

        last_error = None
        last_error_code = None

        for attempt in range(1, max_retries + 1):
            try:
                self._log(
                    "debug",
                    "Enqueue attempt",
                    attempt=attempt,
                    max_retries=max_retries,
                    **log,
                )

                outcome = await self._submit_once(
                    task_identifier, payload, run_at, max_attempts
                )
                if outcome.succeeded:
                    level = (
                        "info"
                        if outcome.strategy_name == self.strategies[0].name
                        else "warning"
                    )
                    self._log(
                        level,
                        "Job enqueued",
                        strategy=outcome.strategy_name,
                        attempt=attempt,
                        **log,
                    )
                    return EnqueueResult(
                        succeeded=True,
                        attempts_used=attempt,
                        elapsed=self._elapsed(started),
                        strategy_used=outcome.strategy_name,
                    )

                last_error = outcome.error_message
                last_error_code = outcome.error_code

            except Exception as e:
                self._log(
                    "error",
                    "Unexpected error during enqueue attempt",
                    attempt=attempt,
                    error=str(e),
                    exc_info=True,
                    **log,
                )
                if attempt == max_retries:
                    return EnqueueResult(
                        succeeded=False,
                        attempts_used=attempt,
                        elapsed=self._elapsed(started),
                        error_code=EnqueueErrorCode.UNEXPECTED_ERROR,
                        error_message=f"Unexpected error: {e}",
                    )

            # No wait after the final attempt
            if attempt < max_retries:
                delay = calculate_delay(attempt, self.config, self.rng)
                self._log(
                    "debug",
                    "Retrying enqueue",
                    attempt=attempt,
                    delay_ms=int(delay / timedelta(milliseconds=1)),
                    **log,
                )
                await self._sleep(delay.total_seconds())

        message = (
            f"Failed to enqueue after {max_retries} attempts. "
            f"Last error: {last_error}"
        )
        self._log(
            "error",
            "Enqueue retries exhausted",
            attempt=max_retries,
            last_error_code=last_error_code,
            error=message,
            **log,
        )
        return EnqueueResult(
            succeeded=False,
            attempts_used=max_retries,
            elapsed=self._elapsed(started),
            error_code=EnqueueErrorCode.MAX_RETRIES_EXCEEDED,
            error_message=message,
        )

    async def _submit_once(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None,
        run_at: datetime | None,
        max_attempts: int | None,
    ) -> SubmissionOutcome:
        """Try each strategy in order; return the first success or last failure."""
        outcome = None
        for strategy in self.strategies:
            outcome = await strategy.submit(
                task_identifier, payload, run_at, max_attempts
            )
            if outcome.succeeded:
                return outcome
            self._log(
                "debug",
                "Submission strategy failed",
                task_identifier=task_identifier,
                strategy=strategy.name,
                error_code=outcome.error_code,
                error=outcome.error_message,
            )
        return outcome

    def get_stats(self) -> dict[str, Any]:
        """
        Report the client's health and effective retry configuration.

        Returns ``{"status": "error", "error": ...}`` instead of raising when
        the report cannot be assembled.
        """
        try:
            return {
                "status": "healthy",
                "timestamp": datetime.now(UTC).isoformat(),
                "config": {
                    "max_retries": self.config.max_retries,
                    "initial_delay_ms": int(
                        self.config.initial_delay / timedelta(milliseconds=1)
                    ),
                    "max_delay_ms": int(
                        self.config.max_delay / timedelta(milliseconds=1)
                    ),
                    "backoff_multiplier": self.config.backoff_multiplier,
                },
                "strategies": [strategy.name for strategy in self.strategies],
            }
        except Exception as e:
            self._log("error", "Failed to get queue stats", error=str(e))
            return {"status": "error", "error": str(e)}

    @staticmethod
    def _elapsed(started: float) -> timedelta:
        return timedelta(seconds=time.monotonic() - started)

    def _log(self, level: str, event: str, **fields: Any) -> None:
        if not self.config.logging_enabled:
            return
        # A broken logger must not interrupt the retry flow
        with contextlib.suppress(Exception):
            getattr(self.logger, level)(event, **fields)
