"""
Health Check Endpoints
======================
Liveness check with a summary of the loaded pricing data.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pricing_db import __version__
from pricing_db.api.deps import get_engine
from pricing_db.core.pricing import PricingEngine

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    provider_count: int
    model_count: int


@router.get("/health", response_model=HealthResponse)
async def health_check(engine: PricingEngine = Depends(get_engine)) -> HealthResponse:
    """
    Liveness check endpoint.
    Returns OK with the number of loaded providers and models.
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        provider_count=engine.provider_count(),
        model_count=engine.model_count(),
    )
