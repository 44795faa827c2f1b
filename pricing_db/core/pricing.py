"""
Token Cost Engine
=================
Cost calculations for token, credit, image and grounding billed providers.

All money values are USD floats rounded to 9 decimal places. Calculations
never raise for bad usage input: negative counts are clamped, unknown
identifiers produce zero-cost results flagged ``unknown``, and anything
noteworthy is reported in ``CostDetails.warnings``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from pricing_db.config import get_settings
from pricing_db.core.store import PricingStore
from pricing_db.schemas.costs import Cost, CostDetails, ImageCost
from pricing_db.schemas.gemini import GeminiResponse, GeminiUsageMetadata
from pricing_db.schemas.pricing import (
    BatchCacheRule,
    CreditPricing,
    GroundingBillingModel,
    GroundingPricing,
    ImageModelPricing,
    ModelPricing,
    PricingTier,
    ProviderPricing,
)

logger = structlog.get_logger()

TOKENS_PER_MILLION = 1_000_000.0
QUERIES_PER_THOUSAND = 1000.0

# Cached tokens bill at 10% of the input rate when no multiplier is configured
DEFAULT_CACHE_MULTIPLIER = 0.10

# 9 places keeps sub-cent per-request costs while dropping float noise
COST_PRECISION = 9

MAX_TOKENS = 2**63 - 1
MAX_CREDITS = 2**63 - 1

GROUNDING_BATCH_WARNING = "grounding/search not supported in batch mode - cost excluded"
TOKEN_OVERFLOW_WARNING = "token count overflow detected - using clamped value"


def round_cost(value: float) -> float:
    """Round a cost to ``COST_PRECISION`` decimal places."""
    return round(value, COST_PRECISION)


def saturating_add(a: int, b: int) -> tuple[int, bool]:
    """
    Add two token counts, saturating at the 64-bit range.

    Returns:
        Tuple of (sum, saturated)
    """
    total = a + b
    if total > MAX_TOKENS:
        return MAX_TOKENS, True
    if total < -MAX_TOKENS - 1:
        return -MAX_TOKENS - 1, True
    return total, False


def select_tier(pricing: ModelPricing, total_input_tokens: int) -> Optional[PricingTier]:
    """Return the highest tier whose threshold the input reaches (inclusive)."""
    selected = None
    for tier in pricing.tiers:
        if total_input_tokens >= tier.threshold_tokens:
            selected = tier
    return selected


def format_threshold(threshold_tokens: int) -> str:
    """Render a tier threshold, e.g. ``>200K`` or ``>100.5K``."""
    if threshold_tokens % 1000 == 0:
        return f">{threshold_tokens // 1000}K"
    return f">{threshold_tokens / 1000:.1f}K".replace(".0K", "K")


def determine_tier_name(pricing: ModelPricing, total_input_tokens: int) -> str:
    tier = select_tier(pricing, total_input_tokens)
    if tier is None:
        return "standard"
    return format_threshold(tier.threshold_tokens)


@dataclass
class _TokenCosts:
    standard_input: float
    cached_input: float
    output: float
    thinking: float

    @property
    def total(self) -> float:
        return self.standard_input + self.cached_input + self.output + self.thinking


def _token_costs(
    pricing: ModelPricing,
    input_tokens: int,
    cached_tokens: int,
    output_tokens: int,
    thinking_tokens: int,
    batch_mode: bool,
) -> _TokenCosts:
    """
    Price token counts at the tier rates for ``input_tokens``.

    Batch and cache discounts combine according to the model's rule:
    - stack: cached tokens get cache * batch
    - cache_precedence: cached tokens get cache only; batch applies to
      non-cached input, output and thinking
    """
    tier = select_tier(pricing, input_tokens)
    input_rate = tier.input_per_million if tier else pricing.input_per_million
    output_rate = tier.output_per_million if tier else pricing.output_per_million

    batch_multiplier = 1.0
    if batch_mode and pricing.batch_multiplier:
        batch_multiplier = pricing.batch_multiplier

    cache_multiplier = pricing.cache_read_multiplier or DEFAULT_CACHE_MULTIPLIER

    standard_tokens = input_tokens - cached_tokens
    standard_input = standard_tokens * input_rate / TOKENS_PER_MILLION * batch_multiplier

    cached_input = 0.0
    if cached_tokens > 0:
        cached_input = cached_tokens * input_rate * cache_multiplier / TOKENS_PER_MILLION
        if pricing.rule is BatchCacheRule.STACK:
            cached_input *= batch_multiplier

    output = output_tokens * output_rate / TOKENS_PER_MILLION * batch_multiplier
    thinking = thinking_tokens * output_rate / TOKENS_PER_MILLION * batch_multiplier

    return _TokenCosts(
        standard_input=standard_input,
        cached_input=cached_input,
        output=output,
        thinking=thinking,
    )


class PricingEngine:
    """
    Cost calculator over an immutable ``PricingStore``.

    The engine holds no mutable state; every call reads the store under its
    shared lock, so one engine can serve any number of threads.
    """

    def __init__(self, store: PricingStore):
        self.store = store

    @classmethod
    def from_directory(cls, config_dir: Optional[str | Path] = None) -> "PricingEngine":
        """
        Build an engine from a directory of pricing documents.

        Raises:
            LoadError: The directory is missing, empty, or holds an invalid document
        """
        config_dir = config_dir or get_settings().config_dir
        store = PricingStore.from_directory(config_dir)
        logger.info("Loaded pricing configuration", path=str(config_dir))
        return cls(store)

    def calculate(self, model: str, input_tokens: int, output_tokens: int) -> Cost:
        """
        Calculate cost for plain input/output token usage at base rates.

        Versioned names resolve by prefix (``gpt-4o-2024-08-06`` → ``gpt-4o``).

        Args:
            model: Model identifier, optionally provider-qualified
            input_tokens: Input tokens (negative values count as 0)
            output_tokens: Output tokens (negative values count as 0)

        Returns:
            Cost breakdown; ``unknown`` with zero cost for unknown models
        """
        input_tokens = max(input_tokens, 0)
        output_tokens = max(output_tokens, 0)

        with self.store.reading():
            pricing = self.store._lookup_model(model)

        if pricing is None:
            logger.debug("Unknown model", model=model)
            return Cost(
                model=model,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                unknown=True,
            )

        input_cost = input_tokens * pricing.input_per_million / TOKENS_PER_MILLION
        output_cost = output_tokens * pricing.output_per_million / TOKENS_PER_MILLION

        return Cost(
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            input_cost=round_cost(input_cost),
            output_cost=round_cost(output_cost),
            total_cost=round_cost(input_cost + output_cost),
        )

    def calculate_with_options(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int = 0,
        *,
        batch_mode: bool = False,
    ) -> CostDetails:
        """
        Calculate a detailed breakdown with tiers, caching and batch pricing.

        ``cached_tokens`` is the part of ``input_tokens`` served from cache;
        values above ``input_tokens`` are clamped with a warning.
        """
        input_tokens = max(input_tokens, 0)
        output_tokens = max(output_tokens, 0)
        cached_tokens = max(cached_tokens, 0)

        with self.store.reading():
            pricing = self.store._lookup_model(model)

        if pricing is None:
            logger.debug("Unknown model", model=model)
            return CostDetails(model=model, batch_mode=batch_mode, unknown=True)

        warnings: list[str] = []
        cached_tokens = self._clamp_cached(cached_tokens, input_tokens, warnings)

        return self._details(
            model,
            pricing,
            input_tokens=input_tokens,
            cached_tokens=cached_tokens,
            output_tokens=output_tokens,
            thinking_tokens=0,
            grounding_cost=0.0,
            batch_mode=batch_mode,
            warnings=warnings,
        )

    def calculate_gemini_usage(
        self,
        model: str,
        usage: GeminiUsageMetadata,
        grounding_queries: int = 0,
        *,
        batch_mode: bool = False,
    ) -> CostDetails:
        """
        Calculate cost from Gemini usage metadata.

        Token math:
        - total input = prompt tokens + tool-use prompt tokens
        - standard input = total input - cached tokens
        - thinking tokens bill at the output rate

        ``grounding_queries`` is trusted as given. Use
        ``calculate_gemini_response`` to count queries from a full response.

        In batch mode, grounding is excluded (with a warning) for models that
        do not support it in batch; the total then omits grounding cost.
        """
        return self._usage_details(
            model, usage, grounding_queries, batch_mode=batch_mode, per_prompt_clamp=False
        )

    def calculate_gemini_response(
        self,
        response: GeminiResponse,
        *,
        model: Optional[str] = None,
        batch_mode: bool = False,
    ) -> CostDetails:
        """
        Calculate cost for a complete Gemini response.

        The model is ``model`` when given, else the response's ``modelVersion``.
        Grounding queries are the non-empty web search queries of all
        candidates; providers billing per prompt are charged once per response.
        """
        model = model or response.model_version
        if not model:
            return CostDetails(batch_mode=batch_mode, unknown=True)

        return self._usage_details(
            model,
            response.usage_metadata,
            response.grounding_query_count(),
            batch_mode=batch_mode,
            per_prompt_clamp=True,
        )

    def calculate_grounding(self, model: str, query_count: int) -> float:
        """
        Calculate search grounding cost for a model.

        For per-query billing ``query_count`` is the number of search queries;
        for per-prompt billing callers pass 1 when grounding was used.

        Returns:
            Cost in USD; 0 for unknown models or non-positive counts
        """
        if query_count <= 0:
            return 0.0

        with self.store.reading():
            pricing = self.store._lookup_grounding(model)

        if pricing is None:
            return 0.0
        return round_cost(query_count * pricing.per_thousand_queries / QUERIES_PER_THOUSAND)

    def calculate_credit(self, provider: str, multiplier: str = "") -> int:
        """
        Calculate credits for a request to a credit-billed provider.

        Args:
            provider: Provider name, e.g. "scrapedo"
            multiplier: Feature multiplier name, e.g. "js_rendering"; unknown,
                empty or unconfigured names bill the base cost

        Returns:
            Credits; 0 for unknown providers. Saturates at ``MAX_CREDITS``.
        """
        with self.store.reading():
            pricing = self.store._lookup_credits(provider)

        if pricing is None:
            return 0

        base = pricing.base_cost_per_request
        factor = pricing.multipliers.get(multiplier, 0) if multiplier else 0
        if factor == 0:
            return base

        if base > MAX_CREDITS // factor:
            logger.warning(
                "Credit cost overflow, saturating",
                provider=provider,
                multiplier=multiplier,
            )
            return MAX_CREDITS
        return base * factor

    def calculate_image(self, model: str, image_count: int) -> ImageCost:
        """
        Calculate cost for generated images.

        The model is resolved before looking at ``image_count``: unknown
        models are reported even for zero images, and known models with a
        non-positive count cost nothing.
        """
        with self.store.reading():
            pricing = self.store._lookup_image_model(model)

        if pricing is None:
            return ImageCost(model=model, image_count=image_count, unknown=True)

        if image_count <= 0:
            return ImageCost(model=model, image_count=image_count)

        return ImageCost(
            model=model,
            image_count=image_count,
            cost=round_cost(image_count * pricing.price_per_image),
        )

    def get_pricing(self, model: str) -> Optional[ModelPricing]:
        """Get token pricing for a model, resolving versioned names by prefix."""
        return self.store.get_pricing(model)

    def get_image_pricing(self, model: str) -> Optional[ImageModelPricing]:
        return self.store.get_image_pricing(model)

    def get_grounding_pricing(self, model: str) -> Optional[GroundingPricing]:
        return self.store.get_grounding_pricing(model)

    def get_credit_pricing(self, provider: str) -> Optional[CreditPricing]:
        """Credit pricing of a provider; None tells unknown providers apart."""
        return self.store.get_credit_pricing(provider)

    def get_provider_metadata(self, provider: str) -> Optional[ProviderPricing]:
        return self.store.get_provider_metadata(provider)

    def list_providers(self) -> list[str]:
        return self.store.list_providers()

    def model_count(self) -> int:
        return self.store.model_count()

    def provider_count(self) -> int:
        return self.store.provider_count()

    @staticmethod
    def _clamp_cached(cached_tokens: int, input_tokens: int, warnings: list[str]) -> int:
        if cached_tokens > input_tokens:
            warnings.append(
                f"cached tokens ({cached_tokens}) exceed input tokens ({input_tokens}) - clamped"
            )
            return input_tokens
        return cached_tokens

    def _usage_details(
        self,
        model: str,
        usage: GeminiUsageMetadata,
        grounding_queries: int,
        *,
        batch_mode: bool,
        per_prompt_clamp: bool,
    ) -> CostDetails:
        with self.store.reading():
            pricing = self.store._lookup_model(model)
            grounding = self.store._lookup_grounding(model)

        if pricing is None:
            logger.debug("Unknown model", model=model)
            return CostDetails(model=model, batch_mode=batch_mode, unknown=True)

        warnings: list[str] = []

        input_tokens, overflowed = saturating_add(
            max(usage.prompt_token_count, 0), max(usage.tool_use_prompt_token_count, 0)
        )
        if overflowed:
            warnings.append(TOKEN_OVERFLOW_WARNING)

        cached_tokens = self._clamp_cached(
            max(usage.cached_content_token_count, 0), input_tokens, warnings
        )

        grounding_cost = 0.0
        if grounding_queries > 0:
            if batch_mode and not pricing.batch_grounding_ok:
                warnings.append(GROUNDING_BATCH_WARNING)
            elif grounding is not None:
                if per_prompt_clamp and grounding.billing is GroundingBillingModel.PER_PROMPT:
                    grounding_queries = 1
                grounding_cost = (
                    grounding_queries * grounding.per_thousand_queries / QUERIES_PER_THOUSAND
                )

        return self._details(
            model,
            pricing,
            input_tokens=input_tokens,
            cached_tokens=cached_tokens,
            output_tokens=max(usage.candidates_token_count, 0),
            thinking_tokens=max(usage.thoughts_token_count, 0),
            grounding_cost=grounding_cost,
            batch_mode=batch_mode,
            warnings=warnings,
        )

    def _details(
        self,
        model: str,
        pricing: ModelPricing,
        *,
        input_tokens: int,
        cached_tokens: int,
        output_tokens: int,
        thinking_tokens: int,
        grounding_cost: float,
        batch_mode: bool,
        warnings: list[str],
    ) -> CostDetails:
        costs = _token_costs(
            pricing, input_tokens, cached_tokens, output_tokens, thinking_tokens, batch_mode
        )

        batch_discount = 0.0
        if batch_mode:
            full_price = _token_costs(
                pricing, input_tokens, cached_tokens, output_tokens, thinking_tokens, False
            )
            # Clamp float residue from the subtraction
            batch_discount = max(full_price.total - costs.total, 0.0)

        return CostDetails(
            model=model,
            standard_input_cost=round_cost(costs.standard_input),
            cached_input_cost=round_cost(costs.cached_input),
            output_cost=round_cost(costs.output),
            thinking_cost=round_cost(costs.thinking),
            grounding_cost=round_cost(grounding_cost),
            tier_applied=determine_tier_name(pricing, input_tokens),
            batch_discount=round_cost(batch_discount),
            total_cost=round_cost(costs.total + grounding_cost),
            batch_mode=batch_mode,
            warnings=warnings,
        )
