"""
Cache facade.

The only entry point callers use. Coordinates key derivation, the
file-per-entry store and the stats ledger:

    cache = build_cache(settings)
    response = cache.get(query, params)
    if response is None:
        response = ...upstream call...
        cache.set(query, params, response, model_used, processing_time_ms)

Caching is a pure optimization: every failure is logged and degrades to a
miss (reads) or a dropped write, never an exception.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Mapping

import structlog

from research_cache.config import CacheSettings
from research_cache.core.cache.keys import compute_fingerprint
from research_cache.core.cache.stats import StatsLedger
from research_cache.core.cache.store import STATS_FILENAME, CacheStore
from research_cache.schemas.cache import CacheEntry, CacheStatsResponse

logger = structlog.stdlib.get_logger()

# Average cost of one upstream call; accrued per hit regardless of model/tier
ESTIMATED_SAVINGS_PER_HIT = 0.013

_LOG_QUERY_CHARS = 50


class CacheManager:
    """
    File-backed response cache with TTL expiry and persisted stats.

    Expiry is lazy: an expired entry misses on ``get`` but stays on disk
    until ``cleanup()`` runs. ``cleanup()`` is never scheduled internally.
    """

    def __init__(
        self,
        directory: str | Path,
        ttl_hours: float = 24.0,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._ttl_ms = int(ttl_hours * 60 * 60 * 1000)
        self._clock = clock
        self._store: CacheStore | None = None
        self._stats: StatsLedger | None = None

        if enabled:
            self._initialize()

    def _initialize(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Includes the path existing as a regular file
            logger.error("cache.init_failed", directory=str(self._directory), error=str(e))
            return

        self._store = CacheStore(self._directory)
        self._stats = StatsLedger(self._directory / STATS_FILENAME)
        logger.info("cache.initialized", directory=str(self._directory), ttl_ms=self._ttl_ms)

    @property
    def enabled(self) -> bool:
        return self._store is not None

    @property
    def directory(self) -> Path:
        return self._directory

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        parse: Callable[[Any], Any] | None = None,
    ) -> Any | None:
        """
        Return the cached response, or None on a miss.

        ``parse`` converts the stored payload before the hit is counted; a
        ValueError from it (pydantic ValidationError included) makes the
        lookup a recorded miss and leaves the entry untouched.
        """
        if self._store is None or self._stats is None:
            return None

        key = compute_fingerprint(query, params)
        log = logger.bind(key=key[:12], query=query[:_LOG_QUERY_CHARS])

        try:
            entry = self._store.read(key)
        except (OSError, ValueError) as e:
            log.warning("cache.read_error", error=str(e))
            self._stats.record_miss()
            return None

        if entry is None:
            log.info("cache.miss")
            self._stats.record_miss()
            return None

        if entry.is_expired(self._now_ms()):
            log.info("cache.expired")
            self._stats.record_miss()
            return None

        response = entry.response
        if parse is not None:
            try:
                response = parse(response)
            except ValueError as e:
                log.warning("cache.invalid_payload", error=str(e))
                self._stats.record_miss()
                return None

        try:
            entry.hit_count += 1
            self._store.write(entry)
        except (OSError, ValueError) as e:
            log.warning("cache.hit_count_write_failed", error=str(e))
            self._stats.record_miss()
            return None

        self._stats.record_hit(ESTIMATED_SAVINGS_PER_HIT)
        log.info("cache.hit", hits=entry.hit_count, saved_usd=ESTIMATED_SAVINGS_PER_HIT)
        return response

    def set(
        self,
        query: str,
        params: Mapping[str, Any] | None,
        response: Any,
        model_used: str,
        processing_time_ms: float,
    ) -> None:
        """Store a response, overwriting any entry with the same key."""
        if self._store is None or self._stats is None:
            return

        key = compute_fingerprint(query, params)
        now = self._now_ms()

        try:
            entry = CacheEntry(
                key=key,
                query=query,
                params=dict(params or {}),
                response=response,
                created_at=now,
                expires_at=now + self._ttl_ms,
                hit_count=0,
                model_used=model_used,
                processing_time_ms=processing_time_ms,
            )
            self._store.write(entry)
        except (OSError, ValueError) as e:
            logger.error("cache.store_failed", key=key[:12], error=str(e))
            return

        self._stats.record_set(now)
        logger.info(
            "cache.stored",
            key=key[:12],
            query=query[:_LOG_QUERY_CHARS],
            model=model_used,
            expires_in_ms=self._ttl_ms,
        )

    def clear(self) -> None:
        """Delete every entry file and reset all counters. ``stats.json`` stays."""
        if self._store is None or self._stats is None:
            return

        removed = 0
        try:
            for path in list(self._store.entry_paths()):
                try:
                    path.unlink(missing_ok=True)
                    removed += 1
                except OSError as e:
                    logger.error("cache.clear.unlink_failed", path=path.name, error=str(e))
        except OSError as e:
            logger.error("cache.clear_failed", error=str(e))

        self._stats.reset()
        logger.info("cache.cleared", removed=removed)

    def cleanup(self) -> int:
        """Delete entries whose expiry is before now. Returns the removed count."""
        if self._store is None or self._stats is None:
            return 0

        now = self._now_ms()
        removed = 0
        try:
            for path in list(self._store.entry_paths()):
                try:
                    entry = self._store.load(path)
                except (OSError, ValueError) as e:
                    logger.warning("cache.cleanup.unreadable", path=path.name, error=str(e))
                    continue

                if entry.expires_at < now:
                    try:
                        path.unlink(missing_ok=True)
                        removed += 1
                    except OSError as e:
                        logger.error("cache.cleanup.unlink_failed", path=path.name, error=str(e))
        except OSError as e:
            logger.error("cache.cleanup_failed", error=str(e))

        self._stats.record_removed(removed)
        if removed:
            logger.info("cache.cleanup", removed=removed)
        return removed

    def get_stats(self) -> CacheStatsResponse:
        """Return current counters plus the derived hit rate."""
        if self._stats is None:
            return CacheStatsResponse()
        return self._stats.snapshot()

    def rebuild_stats(self) -> CacheStatsResponse:
        """Recompute entry count and oldest/newest timestamps from disk."""
        if self._store is None or self._stats is None:
            return CacheStatsResponse()

        created: list[int] = []
        try:
            for path in self._store.entry_paths():
                try:
                    created.append(self._store.load(path).created_at)
                except (OSError, ValueError) as e:
                    logger.warning("cache.rebuild.unreadable", path=path.name, error=str(e))
        except OSError as e:
            logger.error("cache.rebuild_failed", error=str(e))
            return self._stats.snapshot()

        self._stats.rebuild(
            total_entries=len(created),
            oldest_entry=min(created, default=None),
            newest_entry=max(created, default=None),
        )
        logger.info("cache.stats_rebuilt", entries=len(created))
        return self._stats.snapshot()


def build_cache(settings: CacheSettings, *, clock: Callable[[], float] = time.time) -> CacheManager:
    """Construct the process-wide cache; call once at startup and pass it around."""
    return CacheManager(
        settings.directory,
        settings.ttl_hours,
        enabled=settings.enabled,
        clock=clock,
    )
