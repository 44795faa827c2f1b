"""
Test Configuration
==================
Pytest fixtures for Pricing DB tests.
"""

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml
from fastapi.testclient import TestClient

from pricing_db.config import get_settings
from pricing_db.core.pricing import PricingEngine
from pricing_db.main import create_app

OPENAI_DOCUMENT: dict[str, Any] = {
    "provider": "openai",
    "billing_type": "token",
    "metadata": {"updated": "2025-11-25", "source_urls": ["https://openai.com/api/pricing/"]},
    "models": {
        "gpt-4o": {
            "input_per_million": 2.50,
            "output_per_million": 10.00,
            "cache_read_multiplier": 0.50,
            "batch_multiplier": 0.50,
            "batch_cache_rule": "stack",
        },
        "gpt-4o-mini": {"input_per_million": 0.15, "output_per_million": 0.60},
        "gpt-4": {"input_per_million": 30.00, "output_per_million": 60.00},
    },
    "image_models": {
        "dall-e-3-1024-standard": {"price_per_image": 0.04},
        "dall-e-3-1024-hd": {"price_per_image": 0.08},
    },
}

ANTHROPIC_DOCUMENT: dict[str, Any] = {
    "provider": "anthropic",
    "billing_type": "token",
    "models": {
        "claude-3-5-sonnet": {
            "input_per_million": 3.00,
            "output_per_million": 15.00,
            "cache_read_multiplier": 0.10,
            "batch_multiplier": 0.50,
            "batch_cache_rule": "stack",
        },
    },
}

GOOGLE_DOCUMENT: dict[str, Any] = {
    "provider": "google",
    "billing_type": "token",
    "models": {
        "gemini-3-pro-preview": {
            "input_per_million": 2.00,
            "output_per_million": 12.00,
            "cache_read_multiplier": 0.10,
            "batch_multiplier": 0.50,
            "batch_cache_rule": "cache_precedence",
            "tiers": [
                {"threshold_tokens": 200000, "input_per_million": 4.00, "output_per_million": 18.00},
            ],
        },
        "gemini-2.5-flash": {
            "input_per_million": 0.30,
            "output_per_million": 2.50,
            "cache_read_multiplier": 0.10,
            "batch_multiplier": 0.50,
            "batch_cache_rule": "cache_precedence",
        },
    },
    "grounding": {
        "gemini-3": {"per_thousand_queries": 14.00, "billing_model": "per_query"},
        "gemini-2.5": {"per_thousand_queries": 35.00, "billing_model": "per_prompt"},
    },
    "image_models": {
        "nano-banana-1k": {"price_per_image": 0.039},
    },
}

SCRAPEDO_DOCUMENT: dict[str, Any] = {
    "provider": "scrapedo",
    "billing_type": "credit",
    "credit_pricing": {
        "base_cost_per_request": 1,
        "multipliers": {"js_rendering": 5, "premium_proxy": 10, "js_premium": 25},
    },
    "subscription_tiers": {
        "hobby": {"credits": 250000, "price_usd": 29.00},
    },
}

PRICING_DOCUMENTS: dict[str, dict[str, Any]] = {
    "anthropic_pricing.yaml": ANTHROPIC_DOCUMENT,
    "google_pricing.yaml": GOOGLE_DOCUMENT,
    "openai_pricing.yaml": OPENAI_DOCUMENT,
    "scrapedo_pricing.yaml": SCRAPEDO_DOCUMENT,
}


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so each test sees its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_pricing(tmp_path: Path) -> Callable[..., Path]:
    """Write ``{filename: document}`` into a fresh pricing directory."""

    def write(documents: dict[str, Any], directory: str = "pricing") -> Path:
        config_dir = tmp_path / directory
        config_dir.mkdir(exist_ok=True)
        for name, document in documents.items():
            path = config_dir / name
            if name.endswith(".json"):
                path.write_text(json.dumps(document), encoding="utf-8")
            elif isinstance(document, str):
                path.write_text(document, encoding="utf-8")
            else:
                path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return config_dir

    return write


@pytest.fixture
def pricing_dir(write_pricing) -> Path:
    """Directory holding the standard test documents."""
    return write_pricing(PRICING_DOCUMENTS)


@pytest.fixture
def engine(pricing_dir: Path) -> PricingEngine:
    """Engine built from the standard test documents."""
    return PricingEngine.from_directory(pricing_dir)


@pytest.fixture
def client(engine: PricingEngine) -> Generator[TestClient, None, None]:
    """Test client serving the standard test documents."""
    app = create_app(engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def gemini_response() -> dict[str, Any]:
    """Grounded Gemini 3 response with 11 search queries over two candidates."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": "Answer"}], "role": "model"},
                "finishReason": "STOP",
                "groundingMetadata": {
                    "webSearchQueries": [f"query {i}" for i in range(8)],
                },
            },
            {
                "content": {"parts": [{"text": "Alternative"}], "role": "model"},
                "finishReason": "STOP",
                "groundingMetadata": {
                    "webSearchQueries": ["query 8", "", "query 9", "query 10"],
                },
            },
        ],
        "usageMetadata": {
            "promptTokenCount": 427,
            "candidatesTokenCount": 486,
            "totalTokenCount": 2790,
            "cachedContentTokenCount": 280,
            "toolUsePromptTokenCount": 1399,
            "thoughtsTokenCount": 478,
        },
        "modelVersion": "gemini-3-pro-preview",
    }
