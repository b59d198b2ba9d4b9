"""
Runtime assembly for hosts that embed the research cache.

    async with lifespan() as runtime:
        result = await runtime.service.search("best note-taking apps with AI")

Builds the cache, the shared HTTP client, the Perplexity client, the research
service and the cleanup scheduler from Settings, and tears them down on exit.
Logging is left to the host (see ``configure_logging``).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

from research_cache import __version__
from research_cache.config import Settings, get_settings
from research_cache.core.cache.maintenance import CleanupScheduler
from research_cache.core.cache.manager import CacheManager, build_cache
from research_cache.providers.perplexity import PerplexityClient, create_http_client
from research_cache.services.research import ResearchService

logger = structlog.stdlib.get_logger()


@dataclass
class ResearchRuntime:
    settings: Settings
    cache: CacheManager
    service: ResearchService
    scheduler: CleanupScheduler | None


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncIterator[ResearchRuntime]:
    settings = settings or get_settings()
    cache = build_cache(settings.cache)
    http_client = create_http_client(settings.perplexity)
    scheduler: CleanupScheduler | None = None

    try:
        client = PerplexityClient(settings.perplexity, http_client)
        service = ResearchService(cache, client, settings.perplexity)

        # A disabled cache has nothing to reclaim
        if cache.enabled:
            scheduler = CleanupScheduler(cache, settings.cache.cleanup_interval_seconds)
            scheduler.start()

        await logger.ainfo(
            "research_cache.startup",
            version=__version__,
            cache_enabled=cache.enabled,
            cache_directory=str(cache.directory),
            default_model=settings.perplexity.default_model,
        )
        yield ResearchRuntime(settings=settings, cache=cache, service=service, scheduler=scheduler)
    finally:
        if scheduler is not None:
            await scheduler.stop()
        await http_client.aclose()
        await logger.ainfo("research_cache.shutdown")
