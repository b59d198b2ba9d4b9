"""Token- and action-based cost estimation for Perplexity calls."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from research_cache.core.cost.pricing import PER_MILLION, PER_THOUSAND, get_model_pricing
from research_cache.schemas.cost import CostTier, Usage

logger = structlog.stdlib.get_logger()

_SIX_PLACES = Decimal("0.000001")


def _d(value: float | int) -> Decimal:
    return Decimal(str(value))


def _per_million(tokens: int, rate: float) -> Decimal:
    return _d(tokens) / PER_MILLION * _d(rate)


def calculate_perplexity_cost(
    model: str,
    usage: Usage | Mapping[str, Any],
    tier: CostTier | str | None = None,
) -> float | None:
    """
    Estimate the USD cost of one Perplexity API call.

    Returns None for models missing from the pricing table. Optional usage
    counters that are absent simply contribute nothing. Never raises.
    """
    pricing = get_model_pricing(model)
    if pricing is None:
        logger.error("cost.unknown_model", model=model)
        return None

    if not isinstance(usage, Usage):
        try:
            usage = Usage.model_validate(usage)
        except ValidationError as e:
            logger.error("cost.invalid_usage", model=model, error=str(e))
            return None

    tokens = pricing.token_pricing
    cost = _per_million(usage.prompt_tokens, tokens.input)
    cost += _per_million(usage.completion_tokens, tokens.output)

    if tokens.reasoning is not None and usage.reasoning_tokens:
        cost += _per_million(usage.reasoning_tokens, tokens.reasoning)
    if tokens.citation is not None and usage.citation_tokens:
        cost += _per_million(usage.citation_tokens, tokens.citation)

    actions = pricing.action_pricing
    if actions.request_fees_by_tier is not None:
        fee = _tier_fee(actions.request_fees_by_tier, tier)
        if fee is not None:
            cost += _d(fee) / PER_THOUSAND
        else:
            logger.warning("cost.tier_not_applied", model=model, tier=tier)
    elif actions.search_query_fee is not None and usage.search_queries:
        cost += _d(usage.search_queries) / PER_THOUSAND * _d(actions.search_query_fee)

    total = cost.quantize(_SIX_PLACES)
    logger.debug(
        "cost.calculated",
        model=model,
        tier=str(tier) if tier else None,
        prompt_tokens=usage.prompt_tokens,
        completion_tokens=usage.completion_tokens,
        estimated_cost=str(total),
    )
    return float(total)


def _tier_fee(fees: Mapping[CostTier, float], tier: CostTier | str | None) -> float | None:
    if tier is None:
        return None
    try:
        return fees.get(CostTier(tier))
    except ValueError:
        return None
