"""
API Dependencies
================
"""

from fastapi import HTTPException, Request, status

from pricing_db.core.pricing import PricingEngine


def get_engine(request: Request) -> PricingEngine:
    """The engine the application was started with."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pricing data not loaded",
        )
    return engine
