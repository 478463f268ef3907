"""Rows of the key and team tables that key authentication reads."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

_DATETIME_FIELDS = ("expires", "budget_reset_at", "created_at", "updated_at")
_LIST_FIELDS = ("allowed_cache_controls", "allowed_routes")
_REQUIRED = ("token", "spend", "models")


def _naive_datetime(value: Any, name: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValueError(f"invalid {name}: {value!r}") from None
    if not isinstance(value, datetime):
        raise ValueError(f"invalid {name}: {value!r}")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _string_list(value: Any, name: str) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of strings")
    return list(value)


@dataclass(kw_only=True)
class VerificationToken:
    """A row of ``boom_verification_token``, limited to what authentication needs."""

    token: str  # SHA-256 hash of the API key
    key_name: Optional[str] = None
    key_alias: Optional[str] = None
    spend: float = 0.0
    expires: Optional[datetime] = None  # None means the key never expires
    models: list[str]
    aliases: Any = None
    config: Any = None
    user_id: Optional[str] = None
    team_id: Optional[str] = None
    permissions: Any = None
    max_parallel_requests: Optional[int] = None
    metadata: Any = None
    blocked: Optional[bool] = None
    tpm_limit: Optional[int] = None
    rpm_limit: Optional[int] = None
    max_budget: Optional[float] = None
    budget_duration: Optional[str] = None  # e.g. "1d", "7d", "30d"
    budget_reset_at: Optional[datetime] = None
    allowed_cache_controls: Optional[list[str]] = None
    allowed_routes: Optional[list[str]] = None
    model_spend: Any = None
    model_max_budget: Any = None
    budget_id: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> VerificationToken:
        """Build from a database row; timestamps become naive UTC datetimes."""
        missing = [name for name in _REQUIRED if name not in row]
        if missing:
            raise ValueError(f"token row is missing {', '.join(missing)}")
        spend = row["spend"]
        if isinstance(spend, bool) or not isinstance(spend, (int, float)):
            raise ValueError(f"invalid spend: {spend!r}")

        values = {f.name: row.get(f.name) for f in fields(cls) if f.name not in _REQUIRED}
        for name in _DATETIME_FIELDS:
            values[name] = _naive_datetime(values[name], name)
        for name in _LIST_FIELDS:
            if values[name] is not None:
                values[name] = _string_list(values[name], name)
        return cls(
            token=row["token"],
            spend=float(spend),
            models=_string_list(row["models"], "models"),
            **values,
        )


@dataclass
class TeamRow:
    """The parts of a ``boom_team_table`` row that authentication uses."""

    models: list[str]
    team_alias: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TeamRow:
        if "models" not in row:
            raise ValueError("team row is missing models")
        return cls(models=_string_list(row["models"], "models"), team_alias=row.get("team_alias"))