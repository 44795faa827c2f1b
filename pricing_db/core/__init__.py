"""
Core Business Logic
====================
Pricing store, validation and cost calculations.
"""

from pricing_db.core.defaults import get_pricing_engine, must_load_engine
from pricing_db.core.exceptions import (
    LoadError,
    PricingError,
    PricingValidationError,
    ResponseParseError,
)
from pricing_db.core.pricing import PricingEngine
from pricing_db.core.store import PricingStore

__all__ = [
    "PricingEngine",
    "PricingStore",
    "PricingError",
    "LoadError",
    "PricingValidationError",
    "ResponseParseError",
    "get_pricing_engine",
    "must_load_engine",
]
