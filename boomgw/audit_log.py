"""Request audit log: database interface, log records and table migration."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

_log = logging.getLogger(__name__)

# Keeps fire-and-forget tasks alive until they finish.
_pending_tasks: set[asyncio.Task] = set()

_INSERT_SQL = """INSERT INTO boom_request_log
   (request_id, key_hash, key_name, key_alias, team_id, model, model_name, api_path,
    is_stream, status_code, error_type, error_message,
    input_tokens, output_tokens, duration_ms, deployment_id)
   VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16)"""

_REQUEST_LOG_DDL = """
CREATE TABLE IF NOT EXISTS boom_request_log (
    id             UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    request_id     TEXT,
    key_hash       TEXT NOT NULL,
    key_name       TEXT,
    key_alias      TEXT,
    team_id        TEXT,
    model          TEXT NOT NULL,
    api_path       TEXT NOT NULL,
    is_stream      BOOLEAN NOT NULL DEFAULT false,
    status_code    SMALLINT NOT NULL DEFAULT 200,
    error_type     TEXT,
    error_message  TEXT,
    input_tokens   INTEGER,
    output_tokens  INTEGER,
    duration_ms    INTEGER,
    created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_request_log_created ON boom_request_log(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_request_log_key_hash ON boom_request_log(key_hash);
CREATE INDEX IF NOT EXISTS idx_request_log_model ON boom_request_log(model);
"""

# Upgrades for tables created by older versions; failures are ignored.
_OPTIONAL_MIGRATIONS = (
    "ALTER TABLE boom_request_log ADD COLUMN IF NOT EXISTS key_alias TEXT",
    "ALTER TABLE boom_request_log ADD COLUMN IF NOT EXISTS deployment_id TEXT",
    "ALTER TABLE boom_request_log ADD COLUMN IF NOT EXISTS model_name TEXT",
    "CREATE INDEX IF NOT EXISTS idx_request_log_model_name ON boom_request_log(model_name)",
)


class Database(ABC):
    """Asynchronous SQL database using ``$n`` positional placeholders."""

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        """Run a statement that returns no rows."""

    @abstractmethod
    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[Mapping[str, Any]]:
        """Run a query and return every row as a column-name mapping."""

    @abstractmethod
    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Mapping[str, Any]]:
        """Run a query and return its first row, or None when there is none."""


@dataclass(kw_only=True)
class RequestLog:
    """A single request log record."""

    request_id: Optional[str] = None
    key_hash: str
    key_name: Optional[str] = None
    key_alias: Optional[str] = None
    team_id: Optional[str] = None
    model: str
    model_name: Optional[str] = None
    api_path: str
    is_stream: bool
    status_code: int
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    duration_ms: Optional[int] = None
    deployment_id: Optional[str] = None

    def insert_params(self) -> tuple[Any, ...]:
        """Values for the INSERT statement, in placeholder order."""
        return (
            self.request_id,
            self.key_hash,
            self.key_name,
            self.key_alias,
            self.team_id,
            self.model,
            self.model_name,
            self.api_path,
            self.is_stream,
            self.status_code,
            self.error_type,
            self.error_message,
            self.input_tokens,
            self.output_tokens,
            self.duration_ms,
            self.deployment_id,
        )


async def _insert(database: Database, log: RequestLog) -> None:
    try:
        await database.execute(_INSERT_SQL, log.insert_params())
    except Exception as exc:  # a lost log line must never fail a request
        _log.debug("Failed to insert request log: %s", exc)


def log_request(database: Optional[Database], log: RequestLog) -> Optional[asyncio.Task]:
    """Insert ``log`` in the background without waiting for it.

    Does nothing and returns None when no database is configured; otherwise
    returns the task, which never raises. Must be called from a running loop.
    """
    if database is None:
        return None
    task = asyncio.get_running_loop().create_task(_insert(database, log))
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)
    return task


def request_log_ddl() -> str:
    """DDL for the request log table and its indexes."""
    return _REQUEST_LOG_DDL


async def run_request_log_migration(database: Database) -> None:
    """Create the request log table and indexes, then apply column upgrades.

    Table and index creation errors propagate; upgrade errors are ignored.
    """
    for statement in request_log_ddl().split(";"):
        statement = statement.strip()
        if statement:
            await database.execute(statement, ())
    for statement in _OPTIONAL_MIGRATIONS:
        with contextlib.suppress(Exception):
            await database.execute(statement, ())