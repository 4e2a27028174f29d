"""
Submission strategies for getting one job into the backend queue.

A strategy performs a single submission and never retries; retrying is the
QueueService's job. Failures come back as a SubmissionOutcome instead of an
exception.
"""

from datetime import datetime
from typing import Any, Protocol

from jobrelay.v1.queue.backends import QueueBackend
from jobrelay.v1.queue.models import EnqueueErrorCode, SubmissionOutcome


class SubmissionStrategy(Protocol):
    """Protocol for one way of submitting a job."""

    name: str

    async def submit(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None = None,
        run_at: datetime | None = None,
        max_attempts: int | None = None,
    ) -> SubmissionOutcome:
        """Submit the job once and describe what happened."""
        ...


class RpcSubmissionStrategy:
    """Primary path: the backend's add-job remote procedure."""

    name = "rpc"

    def __init__(self, backend: QueueBackend, function: str):
        self.backend = backend
        self.function = function

    async def submit(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None = None,
        run_at: datetime | None = None,
        max_attempts: int | None = None,
    ) -> SubmissionOutcome:
        params = {
            "task_identifier": task_identifier,
            "payload": payload or {},
            "run_at": run_at,
            "max_attempts": max_attempts,
        }
        try:
            result = await self.backend.call_rpc(self.function, params)
        except Exception as e:
            return SubmissionOutcome.failure(
                self.name, EnqueueErrorCode.RPC_ERROR, f"RPC failed: {e}"
            )

        if result is None:
            return SubmissionOutcome.failure(
                self.name,
                EnqueueErrorCode.RPC_NULL_RESULT,
                "RPC returned null result",
            )
        return SubmissionOutcome.success(self.name)


class DirectInsertSubmissionStrategy:
    """Fallback path: insert straight into the queue table."""

    name = "direct_insert"

    def __init__(self, backend: QueueBackend, relation: str):
        self.backend = backend
        self.relation = relation

    async def submit(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None = None,
        run_at: datetime | None = None,
        max_attempts: int | None = None,
    ) -> SubmissionOutcome:
        # The table takes no max_attempts hint; the backend default applies
        row = {"task_identifier": task_identifier, "payload": payload or {}}
        if run_at is not None:
            row["run_at"] = run_at

        try:
            await self.backend.insert_row(self.relation, row)
        except Exception as e:
            return SubmissionOutcome.failure(
                self.name,
                EnqueueErrorCode.DIRECT_INSERT_ERROR,
                f"Direct insert failed: {e}",
            )
        return SubmissionOutcome.success(self.name)
