"""Tests for ExtractorRegistry and style selection."""

from __future__ import annotations

from structlog.testing import capture_logs

from depsentinel.extractors.heavy import HeavyExtractor
from depsentinel.extractors.light import LightExtractor
from depsentinel.extractors.registry import (
    ExtractorDescriptor,
    ExtractorRegistry,
    create_default_registry,
    resolve_style,
)


class TestExtractorRegistry:
    def test_register_and_get(self):
        registry = ExtractorRegistry()
        registry.register(
            ExtractorDescriptor(
                name="test",
                description="",
                precision_score=0.5,
                speed_score=0.5,
                factory=LightExtractor,
            )
        )
        assert registry.get("test") is not None
        assert registry.get("nonexistent") is None

    def test_default_registry_styles(self):
        registry = create_default_registry()
        assert registry.names() == ["heavy", "light"]

    def test_list_all_precision_order(self):
        registry = create_default_registry()
        assert [d.name for d in registry.list_all()] == ["heavy", "light"]

    def test_factories_build_extractors(self):
        registry = create_default_registry()
        heavy = registry.get("heavy").factory(python="python3", timeout=5.0)
        light = registry.get("light").factory(python="python3", timeout=5.0)
        assert isinstance(heavy, HeavyExtractor)
        assert isinstance(light, LightExtractor)


class TestResolveStyle:
    def test_no_env_keeps_configured(self):
        assert resolve_style("light", None, create_default_registry()) == "light"

    def test_empty_env_keeps_configured(self):
        assert resolve_style("heavy", "", create_default_registry()) == "heavy"

    def test_env_overrides_configured(self):
        assert resolve_style("heavy", "light", create_default_registry()) == "light"

    def test_env_is_case_insensitive(self):
        assert resolve_style("heavy", " Light ", create_default_registry()) == "light"

    def test_unknown_env_warns_and_keeps_configured(self):
        with capture_logs() as logs:
            style = resolve_style("light", "medium", create_default_registry())
        assert style == "light"
        assert any(e["event"] == "style.unknown_override" for e in logs)
        assert any(e["log_level"] == "warning" for e in logs)
