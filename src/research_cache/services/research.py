"""
Research service: cached search lifecycle.

Flow: Request validation → Cache lookup → (miss) Perplexity call → Cost estimate → Cache store

The cache is consulted before every upstream call and populated only after
a successful, non-empty one. Upstream errors propagate; cache errors never do.
Cache file I/O runs in a worker thread so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Mapping

import structlog

from research_cache.common.errors import ProviderError
from research_cache.config import PerplexitySettings
from research_cache.core.cache.manager import CacheManager
from research_cache.providers.perplexity import PerplexityClient
from research_cache.schemas.completion import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    WebSearchOptions,
)
from research_cache.schemas.cost import CostTier

logger = structlog.stdlib.get_logger()

DEEP_RESEARCH_MODEL = "sonar-deep-research"

DEEP_RESEARCH_SYSTEM_PROMPT = (
    "You are an expert research analyst. Investigate the question across many "
    "independent sources and write a complete, well-structured report. Be "
    "thorough and precise, cite your sources, and leave out conversational "
    "filler or commentary on your own research process."
)


@dataclass
class ResearchResult:
    response: ChatCompletionResponse
    model: str
    cached: bool
    processing_time_ms: float
    cost_usd: float | None

    @property
    def content(self) -> str:
        return self.response.content


class ResearchService:
    def __init__(
        self,
        cache: CacheManager,
        client: PerplexityClient,
        settings: PerplexitySettings,
    ) -> None:
        self.cache = cache
        self.client = client
        self._settings = settings

    async def search(
        self,
        query: str,
        options: Mapping[str, Any] | None = None,
        *,
        model: str | None = None,
        tier: CostTier | str | None = None,
        system_prompt: str | None = None,
    ) -> ResearchResult:
        """
        Answer ``query`` from the cache or from Perplexity.

        ``options`` are extra chat-completion fields (``search_recency_filter``,
        ``search_after_date_filter``, ``search_domain_filter``, ...). Together
        with model, tier and system prompt they form the cache parameters.
        Unknown options raise pydantic's ValidationError before the cache is
        touched.
        """
        model = model or self._settings.default_model
        effort = CostTier(tier) if tier else self._settings.default_effort

        messages = []
        if system_prompt:
            messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=query))

        request = ChatCompletionRequest(
            **{
                **(options or {}),
                "model": model,
                "messages": messages,
                "web_search_options": WebSearchOptions(search_context_size=effort),
            }
        )
        cache_params: dict[str, Any] = {
            **(options or {}),
            "model": model,
            "tier": effort.value,
            "system_prompt": system_prompt,
        }
        return await self._complete(query, cache_params, request)

    async def deep_research(
        self,
        query: str,
        *,
        reasoning_effort: CostTier | str = CostTier.MEDIUM,
    ) -> ResearchResult:
        """Run an exhaustive multi-source report with ``sonar-deep-research``."""
        effort = CostTier(reasoning_effort)
        request = ChatCompletionRequest(
            model=DEEP_RESEARCH_MODEL,
            messages=[
                ChatMessage(role="system", content=DEEP_RESEARCH_SYSTEM_PROMPT),
                ChatMessage(role="user", content=query),
            ],
            reasoning_effort=effort,
        )
        cache_params = {"model": DEEP_RESEARCH_MODEL, "reasoning_effort": effort.value}
        return await self._complete(query, cache_params, request)

    async def _complete(
        self,
        query: str,
        cache_params: Mapping[str, Any],
        request: ChatCompletionRequest,
    ) -> ResearchResult:
        start = time.perf_counter()

        cached = await asyncio.to_thread(
            self.cache.get, query, cache_params, parse=ChatCompletionResponse.model_validate
        )
        if cached is not None:
            elapsed_ms = (time.perf_counter() - start) * 1000
            await logger.ainfo("research.cache_hit", model=cached.model, latency_ms=int(elapsed_ms))
            return ResearchResult(
                response=cached,
                model=cached.model,
                cached=True,
                processing_time_ms=elapsed_ms,
                cost_usd=0.0,
            )

        response = await self.client.chat_completion(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not response.content:
            await logger.awarning("research.empty_response", response_id=response.id)
            raise ProviderError(
                "Perplexity API returned an empty response.",
                details={
                    "provider": self.client.provider_name,
                    "status_code": 503,
                    "response_id": response.id,
                },
            )

        await asyncio.to_thread(
            self.cache.set,
            query,
            cache_params,
            response.model_dump(mode="json"),
            model_used=response.model,
            processing_time_ms=round(elapsed_ms, 3),
        )

        await logger.ainfo(
            "research.completed",
            model=response.model,
            latency_ms=int(elapsed_ms),
            cost_usd=response.estimated_cost_usd,
            cached=False,
        )
        return ResearchResult(
            response=response,
            model=response.model,
            cached=False,
            processing_time_ms=elapsed_ms,
            cost_usd=response.estimated_cost_usd,
        )
