"""Client settings and environment helpers."""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator

from transcript_logger.domain.enums import MessageType
from transcript_logger.security.http_client import clamp_timeout

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_ENV_FIELDS = {
    "LOKI_URL": "base_url",
    "TRANSCRIPT_LOG_JOB": "job",
    "TRANSCRIPT_LOGGING_ENABLED": "enabled",
    "LOKI_TIMEOUT_SECONDS": "timeout_seconds",
    "LOKI_TENANT_ID": "tenant_id",
    "LOKI_QUERY_LIMIT": "query_limit",
    "TRANSCRIPT_STATS_CATEGORIES": "stats_categories",
    "TRANSCRIPT_STRICT_WINDOWS": "strict_windows",
}


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


def _parse_bool(value: str, default: bool) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return default


class LokiSettings(BaseModel):
    base_url: str = Field(default="http://localhost:3100")
    job: str = Field(default="zaralive-transcripts", min_length=1)
    enabled: bool = Field(default=True)
    timeout_seconds: float = Field(default=10.0)
    push_path: str = Field(default="/loki/api/v1/push")
    query_path: str = Field(default="/loki/api/v1/query_range")
    query_limit: int = Field(default=5000, ge=1)
    tenant_id: Optional[str] = Field(default=None)
    stats_categories: tuple[str, ...] = Field(default=tuple(item.value for item in MessageType))
    strict_windows: bool = Field(default=True)
    batch_workers: int = Field(default=1, ge=1)

    @field_validator("timeout_seconds")
    @classmethod
    def _clamp_timeout(cls, value: float) -> float:
        return clamp_timeout(value)

    @field_validator("stats_categories", mode="before")
    @classmethod
    def _split_categories(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    def request_headers(self) -> dict[str, str]:
        if _is_configured(self.tenant_id):
            return {"X-Scope-OrgID": str(self.tenant_id).strip()}
        return {}


def _from_mapping(source: Mapping[str, Optional[str]]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = source.get(env_name)
        if not _is_configured(raw):
            continue
        text = str(raw).strip()
        if field_name in {"enabled", "strict_windows"}:
            values[field_name] = _parse_bool(text, default=True)
        else:
            values[field_name] = text
    return values


def load_settings(env_file: str | None = None, **overrides: Any) -> LokiSettings:
    """Resolve settings from an optional dotenv file, the process env, then overrides."""
    values: dict[str, Any] = {}
    if env_file:
        values.update(_from_mapping(dotenv_values(env_file)))
    values.update(_from_mapping(os.environ))
    values.update(overrides)
    return LokiSettings(**values)


__all__ = ["LokiSettings", "load_settings"]
