"""
pricing-db
==========
Unified pricing data and cost calculation for AI and non-AI providers:
token-based (with tiers, batch and cache discounts), credit-based,
per-image and search grounding.
"""

from pricing_db.core import (
    LoadError,
    PricingEngine,
    PricingError,
    PricingStore,
    PricingValidationError,
    ResponseParseError,
    get_pricing_engine,
    must_load_engine,
)
from pricing_db.schemas import Cost, CostDetails, ImageCost, ModelPricing, ProviderPricing

__version__ = "1.0.0"

__all__ = [
    "PricingEngine",
    "PricingStore",
    "PricingError",
    "LoadError",
    "PricingValidationError",
    "ResponseParseError",
    "Cost",
    "CostDetails",
    "ImageCost",
    "ModelPricing",
    "ProviderPricing",
    "get_pricing_engine",
    "must_load_engine",
]
