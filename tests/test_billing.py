"""
Non-Token Billing Tests
=======================
Tests for credit, grounding and image pricing.
"""

import pytest

from pricing_db.core.pricing import MAX_CREDITS, PricingEngine
from pricing_db.core.store import PricingStore


class TestCredits:
    """Tests for credit-billed providers."""

    def test_base_cost(self, engine: PricingEngine):
        assert engine.calculate_credit("scrapedo") == 1
        assert engine.calculate_credit("scrapedo", "") == 1

    @pytest.mark.parametrize(
        "multiplier, expected",
        [("js_rendering", 5), ("premium_proxy", 10), ("js_premium", 25)],
    )
    def test_multipliers(self, engine: PricingEngine, multiplier: str, expected: int):
        assert engine.calculate_credit("scrapedo", multiplier) == expected

    def test_unknown_multiplier_uses_base(self, engine: PricingEngine):
        assert engine.calculate_credit("scrapedo", "geo_targeting") == 1

    def test_unknown_provider(self, engine: PricingEngine):
        """Test that unknown providers cost nothing and have no pricing."""
        assert engine.calculate_credit("nope", "js_rendering") == 0
        assert engine.get_credit_pricing("nope") is None

    def test_token_provider_has_no_credits(self, engine: PricingEngine):
        assert engine.calculate_credit("openai") == 0

    def test_overflow_saturates(self):
        store = PricingStore.from_mappings(
            {
                "huge_pricing.yaml": {
                    "billing_type": "credit",
                    "credit_pricing": {
                        "base_cost_per_request": 1_000_000,
                        "multipliers": {"huge": 2**62, "x1": 1},
                    },
                }
            }
        )
        engine = PricingEngine(store)

        assert engine.calculate_credit("huge", "huge") == MAX_CREDITS
        assert engine.calculate_credit("huge", "x1") == 1_000_000

    def test_zero_multiplier_uses_base(self):
        store = PricingStore.from_mappings(
            {
                "free_pricing.yaml": {
                    "credit_pricing": {"base_cost_per_request": 3, "multipliers": {"off": 0}},
                }
            }
        )
        assert PricingEngine(store).calculate_credit("free", "off") == 3


class TestGrounding:
    """Tests for search grounding costs."""

    def test_per_query(self, engine: PricingEngine):
        assert engine.calculate_grounding("gemini-3-pro-preview", 11) == pytest.approx(0.154)

    def test_per_prompt_rate(self, engine: PricingEngine):
        assert engine.calculate_grounding("gemini-2.5-flash", 1) == pytest.approx(0.035)

    @pytest.mark.parametrize("count", [0, -3])
    def test_non_positive_count(self, engine: PricingEngine, count: int):
        assert engine.calculate_grounding("gemini-3-pro-preview", count) == 0

    def test_unknown_model(self, engine: PricingEngine):
        assert engine.calculate_grounding("gpt-4o", 10) == 0

    def test_prefix_boundary(self, engine: PricingEngine):
        assert engine.get_grounding_pricing("gemini-30-ultra") is None
        assert engine.get_grounding_pricing("gemini-3-flash").per_thousand_queries == 14.0


class TestImages:
    """Tests for per-image pricing."""

    def test_single_image(self, engine: PricingEngine):
        result = engine.calculate_image("dall-e-3-1024-standard", 1)

        assert result.found
        assert result.cost == pytest.approx(0.04)

    def test_multiple_images(self, engine: PricingEngine):
        assert engine.calculate_image("dall-e-3-1024-hd", 5).cost == pytest.approx(0.40)
        assert engine.calculate_image("nano-banana-1k", 10).cost == pytest.approx(0.39)

    def test_zero_images_known_model(self, engine: PricingEngine):
        result = engine.calculate_image("dall-e-3-1024-hd", 0)

        assert result.found
        assert result.cost == 0

    def test_unknown_model_reported_even_for_zero(self, engine: PricingEngine):
        result = engine.calculate_image("midjourney-v6", 0)

        assert result.unknown
        assert not result.found
        assert result.cost == 0

    def test_negative_count(self, engine: PricingEngine):
        result = engine.calculate_image("dall-e-3-1024-hd", -2)

        assert result.found
        assert result.cost == 0

    def test_qualified_name(self, engine: PricingEngine):
        assert engine.get_image_pricing("openai/dall-e-3-1024-hd").price_per_image == 0.08
