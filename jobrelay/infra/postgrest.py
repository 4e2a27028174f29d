"""Async PostgREST client for Supabase projects."""

from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder

from jobrelay.config.settings import Settings


class PostgrestError(Exception):
    """Raised when PostgREST answers with an error status."""

    def __init__(self, status_code: int, message: str, code: str | None = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"PostgREST error {status_code}: {message}")


def encode_params(params: dict[str, Any]) -> dict[str, Any]:
    """Convert params, nested values included, into JSON-friendly ones."""
    return jsonable_encoder(params)


def split_relation(relation: str) -> tuple[str | None, str]:
    """Split ``schema.table`` into its schema and table parts."""
    schema, _, name = relation.rpartition(".")
    return (schema or None), name


class PostgrestClient:
    """HTTP client for the Supabase REST endpoint (``/rest/v1``)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=timeout,
            headers=self.default_headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PostgrestClient":
        return cls(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            timeout=settings.supabase_timeout_s,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _handle_response(self, response: httpx.Response) -> Any:
        """Raise on error statuses and decode the body."""
        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {}
            if not isinstance(data, dict):
                data = {}
            message = data.get("message") or response.text or "Unknown error"
            raise PostgrestError(response.status_code, message, data.get("code"))

        if not response.content:
            return None
        return response.json()

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Call a Postgres function exposed by PostgREST."""
        schema, name = split_relation(function)
        headers = {"Content-Profile": schema} if schema else {}
        response = await self.client.post(
            f"/rpc/{name}", json=encode_params(params), headers=headers
        )
        return self._handle_response(response)

    async def insert(self, relation: str, row: dict[str, Any]) -> None:
        """Insert a single row without asking for it back."""
        schema, name = split_relation(relation)
        headers = {"Prefer": "return=minimal"}
        if schema:
            headers["Content-Profile"] = schema
        response = await self.client.post(
            f"/{name}", json=encode_params(row), headers=headers
        )
        self._handle_response(response)

    async def ping(self) -> None:
        """Fetch the OpenAPI root to confirm the endpoint is reachable."""
        response = await self.client.get("/")
        self._handle_response(response)

    async def close(self) -> None:
        await self.client.aclose()
