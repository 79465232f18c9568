"""
Tests for the Collector Registry

Covers:
    - Default registry contents
    - Enabling and disabling collectors from configuration
    - Custom registries
"""

import pytest

from devmetrics.collectors import GPUCollector, NetDevCollector
from devmetrics.registry import CollectorRegistry, build_collectors, default_registry


class TestCollectorRegistry:
    """Registry behaviour."""

    def test_default_registry(self):
        """Test built-in collectors are registered in order."""
        registry = default_registry()
        assert registry.names() == ["netdev", "gpu"]
        assert registry["gpu"] is GPUCollector

    def test_duplicate_registration(self):
        """Test names must be unique."""
        registry = default_registry()
        with pytest.raises(ValueError):
            registry.register("netdev", NetDevCollector)

    def test_registries_independent(self):
        """Test registering into one registry does not affect another."""
        first = default_registry()
        first.register("extra", NetDevCollector)
        assert "extra" not in default_registry()


class TestBuildCollectors:
    """Building collectors from configuration."""

    def test_all_enabled(self, default_config):
        """Test default configuration enables every collector."""
        collectors = build_collectors(default_config)
        assert [type(c) for c in collectors] == [NetDevCollector, GPUCollector]

    def test_disabled(self, default_config):
        """Test disabled collectors are skipped."""
        default_config["collectors"]["gpu"]["enabled"] = False
        collectors = build_collectors(default_config)
        assert [c.name for c in collectors] == ["netdev"]

    def test_missing_section_enabled(self):
        """Test collectors without config are enabled."""
        collectors = build_collectors({})
        assert [c.name for c in collectors] == ["netdev", "gpu"]

    def test_unknown_collector_ignored(self, caplog):
        """Test unknown names in configuration are logged."""
        with caplog.at_level("WARNING", logger="devmetrics.registry"):
            collectors = build_collectors({"collectors": {"disk": {"enabled": True}}})
        assert "disk" in caplog.text
        assert [c.name for c in collectors] == ["netdev", "gpu"]

    def test_custom_registry(self, default_config):
        """Test only the given registry's collectors are built."""
        registry = CollectorRegistry({"netdev": NetDevCollector})
        collectors = build_collectors(default_config, registry)
        assert len(collectors) == 1
        assert isinstance(collectors[0], NetDevCollector)
        assert collectors[0].logger.name == "devmetrics.netdev"
