"""
Pricing Schemas
===============
Pydantic models for provider pricing documents.

Field names match the snake_case keys of the ``*_pricing.yaml`` documents.
Models are frozen; nested collections are handed out as deep copies by the
store so callers can never change the loaded tables.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BatchCacheRule(str, Enum):
    """How batch and cache discounts combine for cached input tokens."""

    # cached rate = input * cache * batch (Anthropic, OpenAI)
    STACK = "stack"
    # cached rate = input * cache, batch only touches non-cached tokens (Gemini)
    CACHE_PRECEDENCE = "cache_precedence"


class GroundingBillingModel(str, Enum):
    """How grounding queries are billed."""

    PER_QUERY = "per_query"
    PER_PROMPT = "per_prompt"


class BillingType(str, Enum):
    """Billing scheme tag of a provider document."""

    TOKEN = "token"
    CREDIT = "credit"
    IMAGE = "image"


class _PricingModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class PricingTier(_PricingModel):
    """Rates that apply once total input tokens reach ``threshold_tokens``."""

    threshold_tokens: int
    input_per_million: float
    output_per_million: float


class ModelPricing(_PricingModel):
    """Per-token rates for a model, in USD per million tokens."""

    input_per_million: float = 0.0
    output_per_million: float = 0.0
    tiers: list[PricingTier] = Field(default_factory=list)
    cache_read_multiplier: float | None = None
    batch_multiplier: float | None = None
    batch_cache_rule: str = ""
    # Reference only; audio tokens are not priced by the engine.
    audio_input_per_million: float | None = None
    batch_grounding_ok: bool = False

    @property
    def rule(self) -> BatchCacheRule:
        """Effective batch/cache rule (``stack`` when unset)."""
        if self.batch_cache_rule == BatchCacheRule.CACHE_PRECEDENCE.value:
            return BatchCacheRule.CACHE_PRECEDENCE
        return BatchCacheRule.STACK


class GroundingPricing(_PricingModel):
    """Search grounding cost per 1000 queries."""

    per_thousand_queries: float = 0.0
    billing_model: str = ""

    @property
    def billing(self) -> GroundingBillingModel:
        """Effective billing model (``per_query`` when unset)."""
        if self.billing_model == GroundingBillingModel.PER_PROMPT.value:
            return GroundingBillingModel.PER_PROMPT
        return GroundingBillingModel.PER_QUERY


class CreditPricing(_PricingModel):
    """Credit cost per request and named feature multipliers."""

    base_cost_per_request: int = 0
    multipliers: dict[str, int] = Field(default_factory=dict)


class ImageModelPricing(_PricingModel):
    """Cost per generated image in USD."""

    price_per_image: float = 0.0


class SubscriptionTier(_PricingModel):
    """A subscription plan of a credit-based provider."""

    credits: int = 0
    price_usd: float = 0.0


class PricingMetadata(_PricingModel):
    """Source and freshness information of a pricing document."""

    updated: str = ""
    source: str = ""
    source_urls: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class ProviderPricing(_PricingModel):
    """All pricing data loaded from a single provider document."""

    provider: str = ""
    billing_type: str = ""
    models: dict[str, ModelPricing] = Field(default_factory=dict)
    image_models: dict[str, ImageModelPricing] = Field(default_factory=dict)
    grounding: dict[str, GroundingPricing] = Field(default_factory=dict)
    credit_pricing: CreditPricing | None = None
    subscription_tiers: dict[str, SubscriptionTier] = Field(default_factory=dict)
    metadata: PricingMetadata = Field(default_factory=PricingMetadata)
