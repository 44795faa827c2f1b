"""
Pricing Endpoints
=================
Read-only access to providers and per-model pricing.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from pricing_db.api.deps import get_engine
from pricing_db.core.pricing import PricingEngine
from pricing_db.schemas.api import ProvidersResponse
from pricing_db.schemas.pricing import ImageModelPricing, ModelPricing, ProviderPricing

router = APIRouter()
logger = structlog.get_logger()


@router.get(
    "/providers",
    response_model=ProvidersResponse,
    summary="List providers",
)
async def list_providers(engine: PricingEngine = Depends(get_engine)) -> ProvidersResponse:
    return ProvidersResponse(
        providers=engine.list_providers(),
        model_count=engine.model_count(),
        provider_count=engine.provider_count(),
    )


@router.get(
    "/providers/{provider}",
    response_model=ProviderPricing,
    summary="Get provider pricing",
    description="Get the full pricing document of a provider",
)
async def get_provider(
    provider: str,
    engine: PricingEngine = Depends(get_engine),
) -> ProviderPricing:
    pricing = engine.get_provider_metadata(provider)
    if pricing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown provider: {provider}",
        )
    return pricing


@router.get(
    "/models/{model:path}",
    response_model=ModelPricing,
    summary="Get model pricing",
    description="Resolve a model name (exact, prefix or provider/model) to its pricing",
)
async def get_model(
    model: str,
    engine: PricingEngine = Depends(get_engine),
) -> ModelPricing:
    pricing = engine.get_pricing(model)
    if pricing is None:
        logger.debug("Model lookup miss", model=model)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown model: {model}",
        )
    return pricing


@router.get(
    "/image-models/{model:path}",
    response_model=ImageModelPricing,
    summary="Get image model pricing",
)
async def get_image_model(
    model: str,
    engine: PricingEngine = Depends(get_engine),
) -> ImageModelPricing:
    pricing = engine.get_image_pricing(model)
    if pricing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown image model: {model}",
        )
    return pricing
