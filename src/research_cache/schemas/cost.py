"""Pricing and usage schemas for cost estimation."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CostTier(StrEnum):
    """Search-context size; selects the per-request fee."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Usage(BaseModel):
    """Token and action counters reported by the upstream API.

    Accepts both the wire format (``prompt_tokens``) and camelCase
    (``promptTokens``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    reasoning_tokens: int | None = None
    citation_tokens: int | None = None
    search_queries: int | None = None


class TokenPricing(BaseModel):
    """USD per million tokens."""

    model_config = ConfigDict(frozen=True)

    input: float = Field(ge=0)
    output: float = Field(ge=0)
    reasoning: float | None = Field(None, ge=0)
    citation: float | None = Field(None, ge=0)


class ActionPricing(BaseModel):
    """Either tiered request fees or a flat search-query fee, never both.

    Fees are USD per 1000 requests / per 1000 search queries.
    """

    model_config = ConfigDict(frozen=True)

    request_fees_by_tier: dict[CostTier, float] | None = None
    search_query_fee: float | None = Field(None, ge=0)

    @model_validator(mode="after")
    def _one_fee_shape(self) -> ActionPricing:
        if (self.request_fees_by_tier is None) == (self.search_query_fee is None):
            raise ValueError(
                "exactly one of request_fees_by_tier or search_query_fee must be set"
            )
        return self


class ModelPricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    token_pricing: TokenPricing
    action_pricing: ActionPricing
