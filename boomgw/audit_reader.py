"""Paginated, filtered reading of the request audit log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from boomgw.audit_log import Database

_DEFAULT_PAGE = 1
_DEFAULT_PER_PAGE = 50
_OK_STATUS = 200


def _int_param(data: Mapping[str, Any], name: str, default: int) -> int:
    value = data.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"invalid {name}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"invalid {name}: {value!r}") from None
    raise ValueError(f"invalid {name}: {value!r}")


def _str_param(data: Mapping[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"invalid {name}: {value!r}")


@dataclass
class ListLogsQuery:
    """Filters and pagination for listing request logs."""

    page: int = _DEFAULT_PAGE
    per_page: int = _DEFAULT_PER_PAGE
    key_hash: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ListLogsQuery:
        """Build from query parameters; numbers may be given as strings."""
        return cls(
            page=_int_param(data, "page", _DEFAULT_PAGE),
            per_page=_int_param(data, "per_page", _DEFAULT_PER_PAGE),
            key_hash=_str_param(data, "key_hash"),
            model=_str_param(data, "model"),
            status=_str_param(data, "status"),
        )


_LOG_ROW_REQUIRED = ("key_hash", "model", "api_path", "is_stream", "status_code")


@dataclass(kw_only=True)
class LogRow:
    """A single row of the request log."""

    request_id: Optional[str] = None
    key_hash: str
    key_name: Optional[str] = None
    team_id: Optional[str] = None
    model: str
    api_path: str
    is_stream: bool
    status_code: int
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    duration_ms: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> LogRow:
        missing = [name for name in _LOG_ROW_REQUIRED if name not in row]
        if missing:
            raise ValueError(f"log row is missing {', '.join(missing)}")
        return cls(
            request_id=row.get("request_id"),
            key_hash=row["key_hash"],
            key_name=row.get("key_name"),
            team_id=row.get("team_id"),
            model=row["model"],
            api_path=row["api_path"],
            is_stream=bool(row["is_stream"]),
            status_code=row["status_code"],
            error_type=row.get("error_type"),
            error_message=row.get("error_message"),
            input_tokens=row.get("input_tokens"),
            output_tokens=row.get("output_tokens"),
            duration_ms=row.get("duration_ms"),
            created_at=row.get("created_at"),
        )


@dataclass
class LogsPage:
    logs: list[LogRow] = field(default_factory=list)
    page: int = _DEFAULT_PAGE
    per_page: int = _DEFAULT_PER_PAGE
    total: int = 0


def build_list_logs_sql(query: ListLogsQuery) -> tuple[str, tuple[Any, ...], str, tuple[Any, ...]]:
    """Return ``(select_sql, select_params, count_sql, count_params)`` for ``query``."""
    offset = max(query.page - 1, 0) * query.per_page

    filters: list[tuple[str, Any]] = []
    if query.key_hash is not None:
        filters.append(("key_hash = ${}", query.key_hash))
    if query.model is not None:
        filters.append(("model = ${}", query.model))
    if query.status == "error":
        filters.append(("status_code != ${}", _OK_STATUS))

    clauses = [template.format(n) for n, (template, _) in enumerate(filters, start=1)]
    where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    filter_params = tuple(value for _, value in filters)

    limit_idx = len(filters) + 1
    offset_idx = limit_idx + 1

    select_sql = (
        "SELECT request_id, key_hash, key_name, team_id, model, api_path,\n"
        "       is_stream, status_code, error_type, error_message,\n"
        "       input_tokens, output_tokens, duration_ms, created_at\n"
        "FROM boom_request_log\n"
        f"{where_sql}\n"
        "ORDER BY created_at DESC\n"
        f"LIMIT ${limit_idx} OFFSET ${offset_idx}"
    )
    count_sql = f"SELECT COUNT(*) AS total FROM boom_request_log {where_sql}".rstrip()
    return select_sql, filter_params + (query.per_page, offset), count_sql, filter_params


async def list_logs(database: Database, query: ListLogsQuery) -> LogsPage:
    """Fetch one page of logs, newest first, with the filtered total.

    Row query errors propagate; a failed count reports a total of 0.
    """
    select_sql, select_params, count_sql, count_params = build_list_logs_sql(query)
    rows = await database.fetch_all(select_sql, select_params)
    try:
        count_row = await database.fetch_one(count_sql, count_params)
        total = int(count_row["total"]) if count_row is not None else 0
    except Exception:
        total = 0
    return LogsPage(
        logs=[LogRow.from_mapping(row) for row in rows],
        page=query.page,
        per_page=query.per_page,
        total=total,
    )


def _rfc3339(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def logs_page_to_json(page: LogsPage) -> dict[str, Any]:
    """The JSON response body for a page of logs."""
    logs = [
        {
            "request_id": row.request_id,
            "key_hash": row.key_hash,
            "key_name": row.key_name,
            "team_id": row.team_id,
            "model": row.model,
            "api_path": row.api_path,
            "is_stream": row.is_stream,
            "status_code": row.status_code,
            "error_type": row.error_type,
            "error_message": row.error_message,
            "input_tokens": row.input_tokens,
            "output_tokens": row.output_tokens,
            "duration_ms": row.duration_ms,
            "created_at": _rfc3339(row.created_at),
        }
        for row in page.logs
    ]
    return {"logs": logs, "page": page.page, "per_page": page.per_page, "total": page.total}