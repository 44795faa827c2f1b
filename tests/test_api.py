"""
API Tests
=========
Tests for Pricing DB REST API endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

from pricing_db.main import create_app


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        """Test liveness check."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert data["provider_count"] == 4
        assert data["model_count"] > 0

    def test_startup_loads_configured_directory(self, monkeypatch, pricing_dir):
        monkeypatch.setenv("PRICING_CONFIG_DIR", str(pricing_dir))
        app = create_app()

        with TestClient(app) as c:
            response = c.get("/providers")

        assert response.json()["providers"] == ["anthropic", "google", "openai", "scrapedo"]


class TestPricingEndpoints:
    """Tests for pricing lookup endpoints."""

    def test_list_providers(self, client: TestClient):
        response = client.get("/providers")
        assert response.status_code == 200
        data = response.json()

        assert data["providers"] == ["anthropic", "google", "openai", "scrapedo"]
        assert data["provider_count"] == 4

    def test_get_provider(self, client: TestClient):
        response = client.get("/providers/scrapedo")
        assert response.status_code == 200
        data = response.json()

        assert data["billing_type"] == "credit"
        assert data["credit_pricing"]["multipliers"]["js_premium"] == 25
        assert data["subscription_tiers"]["hobby"]["credits"] == 250000

    def test_get_unknown_provider(self, client: TestClient):
        response = client.get("/providers/nonexistent")
        assert response.status_code == 404

    def test_get_model_by_prefix(self, client: TestClient):
        """Test that versioned names resolve to their base pricing."""
        response = client.get("/models/gpt-4o-2024-08-06")
        assert response.status_code == 200
        data = response.json()

        assert data["input_per_million"] == 2.5
        assert data["output_per_million"] == 10.0

    def test_get_model_qualified(self, client: TestClient):
        response = client.get("/models/google/gemini-3-pro-preview")
        assert response.status_code == 200
        assert response.json()["tiers"][0]["threshold_tokens"] == 200000

    def test_get_unknown_model(self, client: TestClient):
        response = client.get("/models/unknown-model-xyz")
        assert response.status_code == 404

    def test_get_image_model(self, client: TestClient):
        response = client.get("/image-models/dall-e-3-1024-hd")
        assert response.status_code == 200
        assert response.json()["price_per_image"] == 0.08

    def test_get_unknown_image_model(self, client: TestClient):
        response = client.get("/image-models/midjourney")
        assert response.status_code == 404


class TestCostEndpoints:
    """Tests for cost calculation endpoints."""

    def test_token_cost(self, client: TestClient):
        response = client.post(
            "/costs/tokens",
            json={"model": "gpt-4o", "input_tokens": 1000, "output_tokens": 500},
        )
        assert response.status_code == 200
        data = response.json()

        assert data["total_cost"] == pytest.approx(0.0075)
        assert data["unknown"] is False
        assert data["warnings"] == []

    def test_token_cost_batch(self, client: TestClient):
        response = client.post(
            "/costs/tokens",
            json={
                "model": "gpt-4o",
                "input_tokens": 1000,
                "output_tokens": 500,
                "cached_tokens": 200,
                "batch_mode": True,
            },
        )
        data = response.json()

        assert data["total_cost"] == pytest.approx(0.003625)
        assert data["batch_discount"] == pytest.approx(0.003625)

    def test_token_cost_unknown_model(self, client: TestClient):
        response = client.post(
            "/costs/tokens",
            json={"model": "nope", "input_tokens": 1000, "output_tokens": 500},
        )
        assert response.status_code == 200
        assert response.json()["unknown"] is True

    def test_token_cost_missing_model(self, client: TestClient):
        response = client.post("/costs/tokens", json={"input_tokens": 10})
        assert response.status_code == 422

    def test_gemini_cost(self, client: TestClient, gemini_response: dict):
        response = client.post("/costs/gemini", content=json.dumps(gemini_response))
        assert response.status_code == 200
        data = response.json()

        assert data["grounding_cost"] == pytest.approx(0.154)
        assert data["total_cost"] == pytest.approx(0.168716)

    def test_gemini_cost_batch_with_model(self, client: TestClient, gemini_response: dict):
        del gemini_response["modelVersion"]
        response = client.post(
            "/costs/gemini",
            params={"model": "gemini-3-pro-preview", "batch_mode": "true"},
            content=json.dumps(gemini_response),
        )
        data = response.json()

        assert data["batch_mode"] is True
        assert data["grounding_cost"] == 0
        assert len(data["warnings"]) == 1

    def test_gemini_cost_invalid_body(self, client: TestClient):
        response = client.post("/costs/gemini", content="not json")
        assert response.status_code == 400
        assert "parse gemini response" in response.json()["detail"]

    def test_grounding_cost(self, client: TestClient):
        response = client.post(
            "/costs/grounding", json={"model": "gemini-3-pro-preview", "query_count": 11}
        )
        assert response.status_code == 200
        assert response.json()["cost"] == pytest.approx(0.154)

    def test_credit_cost(self, client: TestClient):
        response = client.post(
            "/costs/credits", json={"provider": "scrapedo", "multiplier": "premium_proxy"}
        )
        assert response.status_code == 200
        assert response.json()["credits"] == 10

    def test_credit_cost_unknown_provider(self, client: TestClient):
        response = client.post("/costs/credits", json={"provider": "nope"})
        assert response.json()["credits"] == 0

    def test_image_cost(self, client: TestClient):
        response = client.post(
            "/costs/images", json={"model": "dall-e-3-1024-standard", "image_count": 3}
        )
        assert response.status_code == 200
        data = response.json()

        assert data["cost"] == pytest.approx(0.12)
        assert data["unknown"] is False


class TestMetrics:
    """Tests for the Prometheus endpoint."""

    def test_calculation_counters(self, client: TestClient):
        client.post("/costs/tokens", json={"model": "nope", "input_tokens": 1})
        response = client.get("/metrics/")
        assert response.status_code == 200

        assert 'pricing_calculations_total{kind="tokens"}' in response.text
        assert 'pricing_unknown_total{kind="tokens"}' in response.text
