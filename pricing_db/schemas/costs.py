"""
Cost Schemas
============
Result types returned by the pricing engine.

Each calculation path has its own result type so that no field is ever
"not applicable" for the call that produced it:

- ``Cost``: simple input/output token pricing (``PricingEngine.calculate``)
- ``CostDetails``: full breakdown with tiers, cache, batch, thinking and grounding
- ``ImageCost``: per-image pricing
"""

from pydantic import BaseModel, Field


class Cost(BaseModel):
    """Cost of a plain input/output token calculation.

    Token counts are the clamped (non-negative) values that were priced.
    ``unknown`` is set when the model is not in the pricing data; all
    costs are then zero.
    """

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0
    unknown: bool = False

    def format(self) -> str:
        """Human-readable one-line breakdown."""
        if self.unknown:
            return f"Cost: unknown (model {self.model!r} not in pricing data)"
        return (
            f"Input: ${self.input_cost:.4f} ({self.input_tokens} tokens) | "
            f"Output: ${self.output_cost:.4f} ({self.output_tokens} tokens) | "
            f"Total: ${self.total_cost:.4f}"
        )


class CostDetails(BaseModel):
    """
    Detailed cost breakdown.

    Attributes:
        standard_input_cost: Non-cached input tokens at the tier input rate
        cached_input_cost: Cached input tokens at the discounted cache rate
        output_cost: Output tokens at the tier output rate
        thinking_cost: Thinking tokens, billed at the output rate
        grounding_cost: Search grounding (zero when excluded in batch mode)
        tier_applied: "standard" or the threshold label, e.g. ">200K"
        batch_discount: Amount saved by batch pricing
        total_cost: Sum of all components
        batch_mode: Whether batch pricing was requested
        warnings: Clamping, overflow and unsupported-feature notices
        unknown: Model not found; all costs are zero
    """

    model: str = ""
    standard_input_cost: float = 0.0
    cached_input_cost: float = 0.0
    output_cost: float = 0.0
    thinking_cost: float = 0.0
    grounding_cost: float = 0.0
    tier_applied: str = ""
    batch_discount: float = 0.0
    total_cost: float = 0.0
    batch_mode: bool = False
    warnings: list[str] = Field(default_factory=list)
    unknown: bool = False


class ImageCost(BaseModel):
    """Cost of an image generation request."""

    model: str
    image_count: int = 0
    cost: float = 0.0
    unknown: bool = False

    @property
    def found(self) -> bool:
        return not self.unknown
