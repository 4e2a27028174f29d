"""API Endpoint Wrappers - Typed API calls"""

from typing import Any

from .base import APIClient
from ..utils.config_manager import config


class JobRelayClient:
    """High-level client with typed endpoint methods"""

    def __init__(
        self,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        # Use config values if not provided
        api_config = config.load_config().get("api", {})
        final_base_url = base_url or api_config.get("base_url", "http://localhost:8000")
        final_headers = headers or api_config.get("headers", {})

        self.api = APIClient(
            base_url=final_base_url,
            timeout=int(api_config.get("timeout", 30)),
            headers=final_headers,
        )

    def __enter__(self):
        self.api.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.api.__exit__(exc_type, exc_val, exc_tb)

    # Health Check
    def health_check(self) -> dict[str, Any]:
        """Check API health status"""
        return self.api.get("/healthz")

    # Jobs Endpoints
    def enqueue_job(
        self,
        task_identifier: str,
        payload: dict[str, Any] | None = None,
        run_at: str | None = None,
        max_attempts: int | None = None,
    ) -> dict[str, Any]:
        """Enqueue a job through the relay"""
        body: dict[str, Any] = {"task_identifier": task_identifier}
        if payload is not None:
            body["payload"] = payload
        if run_at:
            body["run_at"] = run_at
        if max_attempts is not None:
            body["max_attempts"] = max_attempts
        return self.api.post("/jobs", json=body)

    def get_queue_stats(self) -> dict[str, Any]:
        """Get queue client statistics"""
        return self.api.get("/jobs/stats")
