"""
File-per-entry cache storage.

Layout::

    <cache_dir>/
        stats.json            aggregate counters (owned by StatsLedger)
        <fingerprint>.json    one CacheEntry each

The store only moves entries between disk and memory; expiry decisions and
stats bookkeeping belong to CacheManager.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from research_cache.common.files import atomic_write
from research_cache.schemas.cache import CacheEntry

STATS_FILENAME = "stats.json"


class CacheStore:
    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> CacheEntry | None:
        """
        Load the entry for ``key``.

        Returns None when no entry file exists; raises OSError or ValueError
        (including pydantic ValidationError) for unreadable or corrupt files.
        """
        path = self.path_for(key)
        try:
            return self.load(path)
        except FileNotFoundError:
            return None

    def load(self, path: Path) -> CacheEntry:
        return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))

    def write(self, entry: CacheEntry) -> None:
        atomic_write(self.path_for(entry.key), entry.to_json())

    def entry_paths(self) -> Iterator[Path]:
        """Yield every entry file, skipping the stats file and temp files."""
        for path in sorted(self.directory.glob("*.json")):
            if path.name == STATS_FILENAME or not path.is_file():
                continue
            yield path
