"""
Default Engine
==============
Package-level convenience functions backed by a shared engine built from
the configured pricing directory.

The shared engine is built once, under a lock, on first use. If loading
fails the functions degrade to an empty engine (every model unknown) and
``init_error()`` returns the failure. Applications that cannot run without
pricing data should build their own ``PricingEngine`` or call
``must_load_engine``.
"""

import threading
from pathlib import Path
from typing import Optional

import structlog

from pricing_db.core.exceptions import LoadError
from pricing_db.core.pricing import PricingEngine
from pricing_db.core.store import PricingStore
from pricing_db.schemas.pricing import ModelPricing

logger = structlog.get_logger()

_init_lock = threading.Lock()
_default_engine: Optional[PricingEngine] = None
_init_error: Optional[LoadError] = None


def _ensure_initialized() -> PricingEngine:
    global _default_engine, _init_error

    if _default_engine is not None:
        return _default_engine

    with _init_lock:
        if _default_engine is None:
            try:
                engine = PricingEngine.from_directory()
            except LoadError as e:
                logger.error("Failed to load pricing configuration", error=str(e))
                _init_error = e
                engine = PricingEngine(PricingStore())
            _default_engine = engine
    return _default_engine


def must_load_engine(config_dir: Optional[str | Path] = None) -> PricingEngine:
    """
    Build an engine or exit the process.

    For callers that cannot do anything useful without pricing data.
    """
    try:
        return PricingEngine.from_directory(config_dir)
    except LoadError as e:
        logger.critical("Pricing configuration is invalid", error=str(e))
        raise SystemExit(1) from e


def get_pricing_engine() -> PricingEngine:
    """Get the shared engine instance."""
    return _ensure_initialized()


def init_error() -> Optional[LoadError]:
    """The error raised while building the shared engine, if any."""
    _ensure_initialized()
    return _init_error


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Total USD cost of a token completion; 0 for unknown models."""
    return get_pricing_engine().calculate(model, input_tokens, output_tokens).total_cost


def calculate_grounding_cost(model: str, query_count: int) -> float:
    return get_pricing_engine().calculate_grounding(model, query_count)


def calculate_credit_cost(provider: str, multiplier: str = "") -> int:
    return get_pricing_engine().calculate_credit(provider, multiplier)


def get_pricing(model: str) -> Optional[ModelPricing]:
    return get_pricing_engine().get_pricing(model)


def list_providers() -> list[str]:
    return get_pricing_engine().list_providers()


def model_count() -> int:
    return get_pricing_engine().model_count()


def provider_count() -> int:
    return get_pricing_engine().provider_count()
