"""
Pydantic Schemas
================
Pricing entities, calculation results and API request/response models.
"""

from pricing_db.schemas.costs import Cost, CostDetails, ImageCost
from pricing_db.schemas.gemini import GeminiResponse, GeminiUsageMetadata
from pricing_db.schemas.pricing import (
    BatchCacheRule,
    BillingType,
    CreditPricing,
    GroundingBillingModel,
    GroundingPricing,
    ImageModelPricing,
    ModelPricing,
    PricingMetadata,
    PricingTier,
    ProviderPricing,
    SubscriptionTier,
)

__all__ = [
    "BatchCacheRule",
    "BillingType",
    "Cost",
    "CostDetails",
    "CreditPricing",
    "GeminiResponse",
    "GeminiUsageMetadata",
    "GroundingBillingModel",
    "GroundingPricing",
    "ImageCost",
    "ImageModelPricing",
    "ModelPricing",
    "PricingMetadata",
    "PricingTier",
    "ProviderPricing",
    "SubscriptionTier",
]
