"""
Collector registry.

Maps collector names to factories. The exporter receives a registry
explicitly and builds only the collectors enabled in configuration.
"""

import logging
from typing import Callable, Dict, Any, Iterator, List, Optional

from .collectors import BaseDeviceCollector, NetDevCollector, GPUCollector

CollectorFactory = Callable[..., BaseDeviceCollector]

logger = logging.getLogger("devmetrics.registry")


class CollectorRegistry:
    """Ordered mapping of collector name to factory."""

    def __init__(self, factories: Optional[Dict[str, CollectorFactory]] = None):
        self._factories: Dict[str, CollectorFactory] = dict(factories or {})

    def register(self, name: str, factory: CollectorFactory) -> None:
        """Add a collector factory; names must be unique."""
        if name in self._factories:
            raise ValueError(f"Collector already registered: {name}")
        self._factories[name] = factory

    def names(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __getitem__(self, name: str) -> CollectorFactory:
        return self._factories[name]


def default_registry() -> CollectorRegistry:
    """Registry of all built-in collectors."""
    return CollectorRegistry({
        NetDevCollector.name: NetDevCollector,
        GPUCollector.name: GPUCollector,
    })


def build_collectors(
    config: Dict[str, Any],
    registry: Optional[CollectorRegistry] = None,
) -> List[BaseDeviceCollector]:
    """
    Instantiate every registered collector enabled in configuration.

    Args:
        config: Full configuration dictionary
        registry: Collector factories; defaults to ``default_registry()``

    Returns:
        List of collectors in registry order
    """
    registry = registry or default_registry()
    collectors_config = config.get("collectors", {}) or {}

    for name in collectors_config:
        if name not in registry:
            logger.warning(f"Unknown collector in config ignored: {name}")

    collectors = []
    for name in registry:
        section = collectors_config.get(name, {}) or {}
        if not section.get("enabled", True):
            logger.info(f"Collector disabled: {name}")
            continue
        collectors.append(registry[name](config, logging.getLogger(f"devmetrics.{name}")))
        logger.info(f"Collector enabled: {name}")
    return collectors
