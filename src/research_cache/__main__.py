"""Maintenance commands for the on-disk research cache.

Usage::

    python -m research_cache stats
    python -m research_cache cleanup
    python -m research_cache clear
    python -m research_cache rebuild-stats

Every command prints a JSON report to stdout; logs go to stderr.
"""

from __future__ import annotations

import json
from typing import Any

import typer

from research_cache.common.logging import configure_logging
from research_cache.config import get_settings
from research_cache.core.cache.manager import CacheManager, build_cache

app = typer.Typer(
    name="research_cache",
    help="Inspect and maintain the research response cache.",
    no_args_is_help=True,
)


def _open_cache() -> CacheManager:
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)
    return build_cache(settings.cache)


def _report(cache: CacheManager, result: dict[str, Any]) -> None:
    result["enabled"] = cache.enabled
    result["directory"] = str(cache.directory)
    typer.echo(json.dumps(result, indent=2))


@app.command("stats")
def stats() -> None:
    """Print the cache counters and hit rate."""
    cache = _open_cache()
    _report(cache, cache.get_stats().model_dump(by_alias=True))


@app.command("cleanup")
def cleanup() -> None:
    """Remove expired entries."""
    cache = _open_cache()
    _report(cache, {"removed": cache.cleanup()})


@app.command("clear")
def clear() -> None:
    """Remove every entry and reset the counters."""
    cache = _open_cache()
    cache.clear()
    _report(cache, {"cleared": True})


@app.command("rebuild-stats")
def rebuild_stats() -> None:
    """Recount entries and oldest/newest timestamps from the files on disk."""
    cache = _open_cache()
    _report(cache, cache.rebuild_stats().model_dump(by_alias=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
