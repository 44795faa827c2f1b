"""
Pricing API Routes
==================
Mounts health checks, pricing lookups and the ``/costs`` calculators
under one router.
"""

from fastapi import APIRouter

from pricing_db.api.endpoints import costs, health, providers

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(providers.router, tags=["Pricing"])
api_router.include_router(costs.router, prefix="/costs", tags=["Costs"])
