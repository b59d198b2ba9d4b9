"""Perplexity model pricing table."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from research_cache.schemas.cost import ActionPricing, CostTier, ModelPricing, TokenPricing

PER_MILLION = 1_000_000
PER_THOUSAND = 1_000


def _tiered(input_rate: float, output_rate: float, low: float, medium: float, high: float) -> ModelPricing:
    return ModelPricing(
        token_pricing=TokenPricing(input=input_rate, output=output_rate),
        action_pricing=ActionPricing(
            request_fees_by_tier={CostTier.LOW: low, CostTier.MEDIUM: medium, CostTier.HIGH: high}
        ),
    )


# Rates as published 2025-07-05: tokens per 1M, request fees per 1000 requests
_PRICING_TABLE: Mapping[str, ModelPricing] = MappingProxyType(
    {
        "sonar": _tiered(1.00, 1.00, low=5, medium=8, high=12),
        "sonar-pro": _tiered(3.00, 15.00, low=6, medium=10, high=14),
        "sonar-reasoning": _tiered(1.00, 5.00, low=5, medium=8, high=12),
        "sonar-reasoning-pro": _tiered(2.00, 8.00, low=6, medium=10, high=14),
        "sonar-deep-research": ModelPricing(
            token_pricing=TokenPricing(input=2.00, output=8.00, reasoning=3.00, citation=2.00),
            action_pricing=ActionPricing(search_query_fee=5.00),
        ),
    }
)


def get_model_pricing(model: str) -> ModelPricing | None:
    """Get pricing info for a model, or None if it is not in the table."""
    return _PRICING_TABLE.get(model)


def list_all_pricing() -> Mapping[str, ModelPricing]:
    """Return the entire (read-only) pricing table."""
    return _PRICING_TABLE
