"""
Default Engine Tests
====================
Tests for the shared package-level engine.
"""

import pytest

from pricing_db.core import defaults
from pricing_db.core.exceptions import LoadError


@pytest.fixture
def reset_default_engine(monkeypatch):
    """Start every test without a shared engine."""
    monkeypatch.setattr(defaults, "_default_engine", None)
    monkeypatch.setattr(defaults, "_init_error", None)


@pytest.mark.usefixtures("reset_default_engine")
class TestDefaultEngine:
    """Tests for lazy initialization and degraded mode."""

    def test_loads_configured_directory(self, monkeypatch, pricing_dir):
        monkeypatch.setenv("PRICING_CONFIG_DIR", str(pricing_dir))

        assert defaults.init_error() is None
        assert defaults.calculate_cost("gpt-4o", 1000, 500) == pytest.approx(0.0075)
        assert defaults.calculate_grounding_cost("gemini-3-pro-preview", 11) == pytest.approx(0.154)
        assert defaults.calculate_credit_cost("scrapedo", "js_premium") == 25
        assert defaults.get_pricing("gpt-4o").input_per_million == 2.5
        assert defaults.list_providers() == ["anthropic", "google", "openai", "scrapedo"]
        assert defaults.provider_count() == 4
        assert defaults.model_count() > 0

    def test_same_instance(self, monkeypatch, pricing_dir):
        monkeypatch.setenv("PRICING_CONFIG_DIR", str(pricing_dir))

        assert defaults.get_pricing_engine() is defaults.get_pricing_engine()

    def test_degrades_on_load_error(self, monkeypatch, tmp_path):
        """Test that a broken directory gives an empty engine and an init error."""
        monkeypatch.setenv("PRICING_CONFIG_DIR", str(tmp_path / "missing"))

        assert isinstance(defaults.init_error(), LoadError)
        assert defaults.calculate_cost("gpt-4o", 1000, 500) == 0
        assert defaults.list_providers() == []


class TestMustLoadEngine:
    """Tests for fail-fast loading."""

    def test_exits_on_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            defaults.must_load_engine(tmp_path / "missing")

        assert exc_info.value.code == 1

    def test_returns_engine(self, pricing_dir):
        engine = defaults.must_load_engine(pricing_dir)
        assert engine.provider_count() == 4
