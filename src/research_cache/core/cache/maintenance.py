"""
Periodic cache cleanup.

The cache never reclaims space on its own. A long-running host that wants
expired entries removed starts one CleanupScheduler next to the cache:

    scheduler = CleanupScheduler(cache, interval_seconds=3600)
    scheduler.start()
    ...
    await scheduler.stop()
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from research_cache.core.cache.manager import CacheManager

logger = structlog.stdlib.get_logger()


class CleanupScheduler:
    def __init__(self, cache: CacheManager, interval_seconds: float = 3600) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Run one cleanup pass off the event loop; returns the removed count."""
        removed = await asyncio.to_thread(self._cache.cleanup)
        await logger.adebug("cache.scheduler.pass", removed=removed)
        return removed

    def start(self) -> None:
        """Start the background loop. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="research-cache-cleanup"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        await logger.ainfo("cache.scheduler.started", interval_seconds=self._interval)
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception as e:
                # Keep the loop alive; the next pass may succeed
                await logger.aexception("cache.scheduler.error", error=str(e))
