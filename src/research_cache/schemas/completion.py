"""Perplexity chat-completion request/response schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from research_cache.schemas.cost import CostTier, Usage


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class WebSearchOptions(BaseModel):
    search_context_size: CostTier | None = None


class ChatCompletionRequest(BaseModel):
    # Unknown options raise instead of being dropped
    model_config = ConfigDict(extra="forbid")

    model: str = Field(min_length=1)
    messages: list[ChatMessage] = Field(min_length=1)
    max_tokens: int | None = Field(None, gt=0)
    temperature: float | None = Field(None, ge=0, le=2)
    top_p: float | None = Field(None, ge=0, le=1)
    search_domain_filter: list[str] | None = None
    search_recency_filter: str | None = None
    # MM/DD/YYYY
    search_after_date_filter: str | None = None
    search_before_date_filter: str | None = None
    search_mode: Literal["web", "academic"] | None = None
    return_images: bool | None = None
    return_related_questions: bool | None = None
    top_k: int | None = Field(None, ge=0)
    stream: bool = False
    presence_penalty: float | None = Field(None, ge=-2, le=2)
    frequency_penalty: float | None = Field(None, ge=0)
    response_format: dict[str, Any] | None = None
    web_search_options: WebSearchOptions | None = None
    # sonar-deep-research only
    reasoning_effort: CostTier | None = None

    @property
    def tier(self) -> CostTier | None:
        if self.web_search_options is None:
            return None
        return self.web_search_options.search_context_size


class Choice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    # Perplexity adds fields (citations, search_results, ...) over time;
    # keep them so cached payloads round-trip unchanged.
    model_config = ConfigDict(extra="allow")

    id: str
    model: str
    created: int
    usage: Usage = Field(default_factory=Usage)
    choices: list[Choice] = Field(default_factory=list)
    citations: list[str] | None = None
    estimated_cost_usd: float | None = None

    @property
    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content
