"""
API Package
===========
HTTP routes over the pricing engine.
"""

from pricing_db.api.router import api_router

__all__ = ["api_router"]
