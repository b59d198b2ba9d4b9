"""
Persisted cache statistics.

The ledger keeps an in-memory CacheStats mirror and rewrites ``stats.json``
after every mutation. Mutations are serialized through one lock, so
concurrent callers in this process never lose updates. Separate processes
sharing a directory still race (last writer wins); the file is a
best-effort aggregate that ``CacheManager.rebuild_stats`` can recompute.
"""

from __future__ import annotations

import threading
from pathlib import Path

import structlog

from research_cache.common.files import atomic_write
from research_cache.schemas.cache import CacheStats, CacheStatsResponse

logger = structlog.stdlib.get_logger()


class StatsLedger:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._stats = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> CacheStats:
        try:
            return CacheStats.model_validate_json(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            pass
        except (OSError, ValueError) as e:
            logger.warning("cache.stats.unreadable", path=str(self._path), error=str(e))

        stats = CacheStats()
        self._save(stats)
        return stats

    def _save(self, stats: CacheStats) -> None:
        try:
            atomic_write(self._path, stats.to_json())
        except OSError as e:
            logger.error("cache.stats.save_failed", path=str(self._path), error=str(e))

    def snapshot(self) -> CacheStatsResponse:
        with self._lock:
            return CacheStatsResponse(**self._stats.model_dump())

    def record_hit(self, savings_usd: float) -> None:
        with self._lock:
            self._stats.total_hits += 1
            self._stats.estimated_cost_savings = round(
                self._stats.estimated_cost_savings + savings_usd, 6
            )
            self._save(self._stats)

    def record_miss(self) -> None:
        with self._lock:
            self._stats.total_misses += 1
            self._save(self._stats)

    def record_set(self, now_ms: int) -> None:
        with self._lock:
            self._stats.total_entries += 1
            self._stats.total_saved += 1
            self._stats.newest_entry = now_ms
            if self._stats.oldest_entry is None:
                self._stats.oldest_entry = now_ms
            self._save(self._stats)

    def record_removed(self, count: int) -> None:
        with self._lock:
            self._stats.total_entries = max(0, self._stats.total_entries - count)
            self._save(self._stats)

    def reset(self) -> None:
        with self._lock:
            self._stats = CacheStats()
            self._save(self._stats)

    def rebuild(self, total_entries: int, oldest_entry: int | None, newest_entry: int | None) -> None:
        """Overwrite the entry-derived fields; hit/miss/savings counters are kept."""
        with self._lock:
            self._stats.total_entries = total_entries
            self._stats.oldest_entry = oldest_entry
            self._stats.newest_entry = newest_entry
            self._save(self._stats)
