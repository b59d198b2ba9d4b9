"""Tests for the pricing table."""

import pytest
from pydantic import ValidationError

from research_cache.core.cost.pricing import get_model_pricing, list_all_pricing
from research_cache.schemas.cost import ActionPricing, CostTier


@pytest.mark.unit
class TestPricingTable:
    def test_known_models(self) -> None:
        assert set(list_all_pricing()) == {
            "sonar",
            "sonar-pro",
            "sonar-reasoning",
            "sonar-reasoning-pro",
            "sonar-deep-research",
        }

    def test_sonar_rates(self) -> None:
        pricing = get_model_pricing("sonar")
        assert pricing is not None
        assert pricing.token_pricing.input == 1.0
        assert pricing.token_pricing.output == 1.0
        assert pricing.action_pricing.request_fees_by_tier == {
            CostTier.LOW: 5,
            CostTier.MEDIUM: 8,
            CostTier.HIGH: 12,
        }

    def test_deep_research_uses_search_fee(self) -> None:
        pricing = get_model_pricing("sonar-deep-research")
        assert pricing is not None
        assert pricing.action_pricing.search_query_fee == 5.0
        assert pricing.action_pricing.request_fees_by_tier is None
        assert pricing.token_pricing.reasoning == 3.0
        assert pricing.token_pricing.citation == 2.0

    def test_every_row_has_exactly_one_fee_shape(self) -> None:
        for model, pricing in list_all_pricing().items():
            tiered = pricing.action_pricing.request_fees_by_tier is not None
            flat = pricing.action_pricing.search_query_fee is not None
            assert tiered != flat, model

    def test_unknown_model(self) -> None:
        assert get_model_pricing("gpt-4o") is None

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            list_all_pricing()["sonar"] = get_model_pricing("sonar-pro")  # type: ignore[index]


@pytest.mark.unit
class TestActionPricingValidation:
    def test_rejects_both_fee_shapes(self) -> None:
        with pytest.raises(ValidationError):
            ActionPricing(request_fees_by_tier={CostTier.LOW: 5}, search_query_fee=5)

    def test_rejects_no_fee_shape(self) -> None:
        with pytest.raises(ValidationError):
            ActionPricing()
