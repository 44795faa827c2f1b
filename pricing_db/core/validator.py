"""
Pricing Validation
==================
Semantic checks for parsed pricing documents.

One function per entity kind. Each raises ``PricingValidationError`` naming
the document, the entity and the offending field; the store builder lets
the first failure abort the whole load.
"""

import math
from typing import NoReturn

from pricing_db.core.exceptions import PricingValidationError
from pricing_db.schemas.pricing import (
    BatchCacheRule,
    BillingType,
    CreditPricing,
    GroundingBillingModel,
    GroundingPricing,
    ImageModelPricing,
    ModelPricing,
)

# Prices above these ceilings are almost certainly typos
MAX_PRICE_PER_MILLION = 10_000.0
MAX_PRICE_PER_IMAGE = 100.0
MAX_PRICE_PER_THOUSAND_QUERIES = 1_000.0
MAX_CREDITS_PER_REQUEST = 1_000_000

_BATCH_CACHE_RULES = {rule.value for rule in BatchCacheRule}
_GROUNDING_BILLING_MODELS = {billing.value for billing in GroundingBillingModel}
_BILLING_TYPES = {billing.value for billing in BillingType}


def _fail(document: str, entity: str, field: str, message: str) -> NoReturn:
    raise PricingValidationError(
        f"{document}: {entity} {message}",
        document=document,
        entity=entity,
        field=field,
    )


def _check_amount(
    document: str,
    entity: str,
    field: str,
    label: str,
    value: float,
    ceiling: float,
) -> None:
    # NaN compares false against both bounds
    if not math.isfinite(value):
        _fail(document, entity, field, f"has non-finite {label}: {value}")
    if value < 0:
        _fail(document, entity, field, f"has negative {label}: {value}")
    if value > ceiling:
        _fail(
            document,
            entity,
            field,
            f"has suspiciously high {label}: {value} (max {ceiling})",
        )


def _check_rate(document: str, entity: str, field: str, label: str, value: float) -> None:
    _check_amount(document, entity, field, label, value, MAX_PRICE_PER_MILLION)


def _check_multiplier(
    document: str, entity: str, field: str, label: str, value: float | None
) -> None:
    if value is None:
        return
    if not math.isfinite(value):
        _fail(document, entity, field, f"has non-finite {label}: {value}")
    if value < 0:
        _fail(document, entity, field, f"has negative {label}: {value}")
    if value > 1.0:
        _fail(
            document,
            entity,
            field,
            f"has {field} > 1.0 ({value}) which would increase the price (likely config error)",
        )


def validate_model_pricing(model: str, pricing: ModelPricing, document: str) -> None:
    """Validate token pricing for a single model."""
    entity = f"model {model!r}"

    _check_rate(document, entity, "input_per_million", "input price", pricing.input_per_million)
    _check_rate(document, entity, "output_per_million", "output price", pricing.output_per_million)

    _check_multiplier(
        document, entity, "batch_multiplier", "batch multiplier", pricing.batch_multiplier
    )
    _check_multiplier(
        document,
        entity,
        "cache_read_multiplier",
        "cache read multiplier",
        pricing.cache_read_multiplier,
    )

    if pricing.batch_cache_rule and pricing.batch_cache_rule not in _BATCH_CACHE_RULES:
        _fail(
            document,
            entity,
            "batch_cache_rule",
            f"has invalid batch_cache_rule {pricing.batch_cache_rule!r} "
            f"(must be one of {sorted(_BATCH_CACHE_RULES)})",
        )

    previous_threshold: int | None = None
    for i, tier in enumerate(pricing.tiers):
        tier_entity = f"{entity} tier {i}"
        if tier.threshold_tokens < 0:
            _fail(
                document,
                tier_entity,
                "threshold_tokens",
                f"has negative threshold: {tier.threshold_tokens}",
            )
        if previous_threshold is not None and tier.threshold_tokens <= previous_threshold:
            reason = "duplicate" if tier.threshold_tokens == previous_threshold else "non-ascending"
            _fail(
                document,
                tier_entity,
                "threshold_tokens",
                f"has {reason} threshold: {tier.threshold_tokens} "
                f"(previous {previous_threshold})",
            )
        _check_rate(document, tier_entity, "input_per_million", "input price", tier.input_per_million)
        _check_rate(
            document, tier_entity, "output_per_million", "output price", tier.output_per_million
        )
        previous_threshold = tier.threshold_tokens


def validate_grounding_pricing(prefix: str, pricing: GroundingPricing, document: str) -> None:
    """Validate grounding pricing for a model prefix."""
    entity = f"grounding prefix {prefix!r}"
    _check_amount(
        document,
        entity,
        "per_thousand_queries",
        "price",
        pricing.per_thousand_queries,
        MAX_PRICE_PER_THOUSAND_QUERIES,
    )
    if pricing.billing_model and pricing.billing_model not in _GROUNDING_BILLING_MODELS:
        _fail(
            document,
            entity,
            "billing_model",
            f"has invalid billing_model {pricing.billing_model!r} "
            f"(must be one of {sorted(_GROUNDING_BILLING_MODELS)})",
        )


def validate_credit_pricing(provider: str, pricing: CreditPricing, document: str) -> None:
    """Validate credit pricing of a provider, checking every multiplier."""
    entity = f"credit pricing for {provider!r}"
    if pricing.base_cost_per_request < 0:
        _fail(
            document,
            entity,
            "base_cost_per_request",
            f"has negative base cost: {pricing.base_cost_per_request}",
        )
    if pricing.base_cost_per_request > MAX_CREDITS_PER_REQUEST:
        _fail(
            document,
            entity,
            "base_cost_per_request",
            f"has suspiciously high base cost: {pricing.base_cost_per_request} "
            f"(max {MAX_CREDITS_PER_REQUEST})",
        )
    for name, value in sorted(pricing.multipliers.items()):
        if value < 0:
            _fail(document, entity, name, f"has negative {name} multiplier: {value}")


def validate_image_pricing(model: str, pricing: ImageModelPricing, document: str) -> None:
    """Validate per-image pricing."""
    entity = f"image model {model!r}"
    _check_amount(
        document, entity, "price_per_image", "price", pricing.price_per_image, MAX_PRICE_PER_IMAGE
    )


def validate_billing_type(provider: str, billing_type: str, document: str) -> None:
    """Validate the billing type tag of a provider document."""
    if billing_type and billing_type not in _BILLING_TYPES:
        _fail(
            document,
            f"provider {provider!r}",
            "billing_type",
            f"has invalid billing_type {billing_type!r} "
            f"(must be one of {sorted(_BILLING_TYPES)})",
        )
