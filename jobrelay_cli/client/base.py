"""Base HTTP Client for the Job Relay API"""

from typing import Any

import httpx
from rich.console import Console

console = Console()


class JobRelayError(Exception):
    """Base exception for Job Relay API errors"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class APIClient:
    """HTTP client for the Job Relay API"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: int = 30,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_headers = headers or {}
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=self.default_headers,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.client.close()

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response and extract data"""
        try:
            data = response.json()
        except ValueError:
            raise JobRelayError(
                f"Invalid JSON response: {response.status_code}",
                status_code=response.status_code,
            ) from None

        if response.status_code >= 400:
            if not isinstance(data, dict):
                data = {}
            error = data.get("error") or {}
            # FastAPI validation errors arrive without the envelope
            error_msg = error.get("message") or str(data.get("detail", "Unknown error"))
            raise JobRelayError(
                f"API Error {response.status_code}: {error_msg}",
                status_code=response.status_code,
                details=error.get("details"),
            )

        # Handle envelope format (with "ok" field)
        if "ok" in data:
            if not data.get("ok", False):
                error_msg = data.get("error", {}).get("message", "Request failed")
                raise JobRelayError(error_msg, status_code=response.status_code)
            return data.get("data", {})

        # Handle direct response format (no envelope)
        return data

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make GET request"""
        try:
            response = self.client.get(f"/v1{path}", params=params, headers=headers)
            return self._handle_response(response)
        except httpx.RequestError as e:
            console.print(f"[red]Connection error: {e}[/red]")
            raise JobRelayError(f"Connection failed: {e}") from None

    def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make POST request"""
        try:
            response = self.client.post(f"/v1{path}", json=json, headers=headers)
            return self._handle_response(response)
        except httpx.RequestError as e:
            console.print(f"[red]Connection error: {e}[/red]")
            raise JobRelayError(f"Connection failed: {e}") from None
