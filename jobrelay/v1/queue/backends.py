"""
Backend clients the submission strategies talk to.

Both backends expose the same two primitives: call a remote procedure and
insert a row into a relation. The job table and the RPC function are owned by
the backend; nothing here creates or migrates them.
"""

import json
import re
from datetime import datetime
from typing import Any, Protocol

from fastapi.encoders import jsonable_encoder
from sqlalchemy import text

from jobrelay.config.settings import QueueBackendType, Settings
from jobrelay.infra.database import Database
from jobrelay.infra.postgrest import PostgrestClient

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class QueueBackend(Protocol):
    """Protocol for the backend client handle shared by all strategies."""

    kind: str

    async def call_rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Invoke a remote procedure and return its (possibly null) result."""
        ...

    async def insert_row(self, relation: str, row: dict[str, Any]) -> None:
        """Insert one row, raising on failure."""
        ...

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...


def validate_identifier(name: str) -> str:
    """Reject anything but ``name`` or ``schema.name`` SQL identifiers."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def bind_expression(key: str, value: Any) -> tuple[str, Any]:
    """Return the SQL placeholder for a parameter and its bind value."""
    validate_identifier(key)
    if isinstance(value, (dict, list)):
        return f"CAST(:{key} AS json)", json.dumps(jsonable_encoder(value))
    if isinstance(value, datetime):
        return f"CAST(:{key} AS timestamptz)", value
    if isinstance(value, bool):
        return f"CAST(:{key} AS boolean)", value
    if isinstance(value, int):
        return f"CAST(:{key} AS integer)", value
    return f":{key}", value


def build_rpc_statement(function: str, params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """Build ``SELECT fn(arg => value, ...)`` using named notation."""
    validate_identifier(function)
    args = []
    binds = {}
    for key, value in params.items():
        expression, bind_value = bind_expression(key, value)
        args.append(f"{key} => {expression}")
        binds[key] = bind_value
    return f"SELECT {function}({', '.join(args)})", binds


def build_insert_statement(relation: str, row: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """Build a single-row ``INSERT INTO relation (...) VALUES (...)``."""
    validate_identifier(relation)
    if not row:
        raise ValueError("Cannot insert an empty row")
    columns = []
    values = []
    binds = {}
    for key, value in row.items():
        expression, bind_value = bind_expression(key, value)
        columns.append(key)
        values.append(expression)
        binds[key] = bind_value
    return (
        f"INSERT INTO {relation} ({', '.join(columns)}) VALUES ({', '.join(values)})",
        binds,
    )


class PostgresQueueBackend:
    """Talks to the queue schema directly through SQLAlchemy (asyncpg)."""

    kind = QueueBackendType.POSTGRES.value

    def __init__(self, database: Database):
        self.database = database

    async def call_rpc(self, function: str, params: dict[str, Any]) -> Any:
        statement, binds = build_rpc_statement(function, params)
        async with self.database.session() as session:
            result = await session.execute(text(statement), binds)
            value = result.scalar()
            await session.commit()
        return value

    async def insert_row(self, relation: str, row: dict[str, Any]) -> None:
        statement, binds = build_insert_statement(relation, row)
        async with self.database.session() as session:
            await session.execute(text(statement), binds)
            await session.commit()

    async def ping(self) -> None:
        async with self.database.session() as session:
            await session.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.database.close()


class SupabaseQueueBackend:
    """Talks to the queue through Supabase's PostgREST layer."""

    kind = QueueBackendType.SUPABASE.value

    def __init__(self, client: PostgrestClient):
        self.client = client

    async def call_rpc(self, function: str, params: dict[str, Any]) -> Any:
        return await self.client.rpc(function, params)

    async def insert_row(self, relation: str, row: dict[str, Any]) -> None:
        await self.client.insert(relation, row)

    async def ping(self) -> None:
        await self.client.ping()

    async def close(self) -> None:
        await self.client.close()


def create_backend(settings: Settings) -> QueueBackend:
    """Build the backend selected by QUEUE_BACKEND."""
    if settings.queue_backend == QueueBackendType.SUPABASE:
        return SupabaseQueueBackend(PostgrestClient.from_settings(settings))
    return PostgresQueueBackend(Database(settings))
