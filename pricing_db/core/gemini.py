"""
Gemini Response Costing
=======================
Decode raw Gemini API responses and price them.
"""

from typing import Optional

from pydantic import ValidationError

from pricing_db.core.exceptions import ResponseParseError
from pricing_db.core.pricing import PricingEngine
from pricing_db.schemas.costs import CostDetails
from pricing_db.schemas.gemini import GeminiResponse


def parse_gemini_response(payload: bytes | str) -> GeminiResponse:
    """
    Decode a Gemini ``generateContent`` JSON response.

    Raises:
        ResponseParseError: The payload is not valid JSON or has the wrong shape
    """
    try:
        return GeminiResponse.model_validate_json(payload)
    except ValidationError as e:
        raise ResponseParseError(f"parse gemini response: {e}") from e


def calculate_gemini_response_cost(
    engine: PricingEngine,
    payload: bytes | str,
    *,
    model: Optional[str] = None,
    batch_mode: bool = False,
) -> CostDetails:
    """Parse a raw Gemini response and calculate its cost."""
    response = parse_gemini_response(payload)
    return engine.calculate_gemini_response(response, model=model, batch_mode=batch_mode)
