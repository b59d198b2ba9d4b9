"""On-disk cache schemas.

Field names are snake_case in Python and camelCase on disk, matching the
JSON layout of ``<fingerprint>.json`` entry files and ``stats.json``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class CacheEntry(_CamelModel):
    """One cached upstream response. Timestamps are epoch milliseconds."""

    key: str
    query: str
    params: dict[str, Any] = Field(default_factory=dict)
    response: Any = None
    created_at: int
    expires_at: int
    hit_count: int = Field(0, ge=0)
    model_used: str = ""
    processing_time_ms: float = 0

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at


class CacheStats(_CamelModel):
    total_entries: int = 0
    total_hits: int = 0
    total_misses: int = 0
    total_saved: int = 0
    oldest_entry: int | None = None
    newest_entry: int | None = None
    estimated_cost_savings: float = 0.0


class CacheStatsResponse(CacheStats):
    """Stats as reported to callers, with the derived hit rate."""

    @computed_field(alias="hitRate")  # type: ignore[prop-decorator]
    @property
    def hit_rate(self) -> float:
        lookups = self.total_hits + self.total_misses
        if lookups == 0:
            return 0.0
        return self.total_hits / lookups * 100
