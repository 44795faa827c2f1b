"""
Cost Endpoints
==============
Cost calculation for token, Gemini, grounding, credit and image usage.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from prometheus_client import Counter

from pricing_db.api.deps import get_engine
from pricing_db.core.exceptions import ResponseParseError
from pricing_db.core.gemini import calculate_gemini_response_cost
from pricing_db.core.pricing import PricingEngine
from pricing_db.schemas.api import (
    CreditCostRequest,
    CreditCostResponse,
    GroundingCostRequest,
    GroundingCostResponse,
    ImageCostRequest,
    TokenCostRequest,
)
from pricing_db.schemas.costs import CostDetails, ImageCost

router = APIRouter()
logger = structlog.get_logger()

CALCULATIONS = Counter(
    "pricing_calculations_total",
    "Cost calculations served",
    ["kind"],
)
UNKNOWN = Counter(
    "pricing_unknown_total",
    "Cost calculations for models or providers without pricing data",
    ["kind"],
)


def _record(kind: str, unknown: bool) -> None:
    CALCULATIONS.labels(kind=kind).inc()
    if unknown:
        UNKNOWN.labels(kind=kind).inc()


@router.post(
    "/tokens",
    response_model=CostDetails,
    summary="Token cost",
    description="Cost of a completion with tiered, cached and batch pricing applied",
)
async def token_cost(
    request: TokenCostRequest,
    engine: PricingEngine = Depends(get_engine),
) -> CostDetails:
    details = engine.calculate_with_options(
        request.model,
        request.input_tokens,
        request.output_tokens,
        request.cached_tokens,
        batch_mode=request.batch_mode,
    )
    _record("tokens", details.unknown)
    return details


@router.post(
    "/gemini",
    response_model=CostDetails,
    summary="Gemini response cost",
    description="Cost of a raw Gemini generateContent response body",
)
async def gemini_cost(
    request: Request,
    model: Optional[str] = Query(None, description="Overrides the response modelVersion"),
    batch_mode: bool = Query(False),
    engine: PricingEngine = Depends(get_engine),
) -> CostDetails:
    payload = await request.body()
    try:
        details = calculate_gemini_response_cost(
            engine, payload, model=model, batch_mode=batch_mode
        )
    except ResponseParseError as e:
        logger.warning("Rejected Gemini response", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    _record("gemini", details.unknown)
    return details


@router.post("/grounding", response_model=GroundingCostResponse, summary="Grounding cost")
async def grounding_cost(
    request: GroundingCostRequest,
    engine: PricingEngine = Depends(get_engine),
) -> GroundingCostResponse:
    cost = engine.calculate_grounding(request.model, request.query_count)
    _record("grounding", engine.get_grounding_pricing(request.model) is None)
    return GroundingCostResponse(
        model=request.model,
        query_count=request.query_count,
        cost=cost,
    )


@router.post("/credits", response_model=CreditCostResponse, summary="Credit cost")
async def credit_cost(
    request: CreditCostRequest,
    engine: PricingEngine = Depends(get_engine),
) -> CreditCostResponse:
    """
    Credits consumed by one request.

    Unknown providers cost 0 credits; unknown multipliers fall back to the
    provider's base cost.
    """
    credits = engine.calculate_credit(request.provider, request.multiplier)
    _record("credits", engine.get_credit_pricing(request.provider) is None)
    return CreditCostResponse(
        provider=request.provider,
        multiplier=request.multiplier,
        credits=credits,
    )


@router.post("/images", response_model=ImageCost, summary="Image generation cost")
async def image_cost(
    request: ImageCostRequest,
    engine: PricingEngine = Depends(get_engine),
) -> ImageCost:
    result = engine.calculate_image(request.model, request.image_count)
    _record("images", result.unknown)
    return result
