"""
Base Device Collector Interface

All device collectors inherit from BaseDeviceCollector and implement
``update()``. This keeps sample emission uniform across device types and
vendors, and lets the exporter drive every collector the same way.
"""

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Iterator


# =============================================================================
# Errors
# =============================================================================

class CollectorError(Exception):
    """Base class for all collection pass failures."""


class ConfigurationError(CollectorError):
    """Collector configuration could not be applied."""


class PlatformQueryError(CollectorError):
    """The OS/platform statistics API call failed."""


class NormalizationError(CollectorError):
    """A retained record could not be converted to a numeric mapping."""


class VendorAPIUnavailable(CollectorError):
    """The vendor management API could not be initialized."""


class VendorReadError(CollectorError):
    """A per-device telemetry read failed mid-enumeration."""


# =============================================================================
# Sample model
# =============================================================================

class MetricKind(enum.Enum):
    """Type of a metric sample."""
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricSample:
    """Represents a single typed, labeled metric value."""
    name: str
    kind: MetricKind
    value: float
    labels: Dict[str, str] = field(default_factory=dict)
    documentation: str = ""


def build_fq_name(*parts: str) -> str:
    """Join non-empty name parts with underscores."""
    return "_".join(p for p in parts if p)


class BaseDeviceCollector(ABC):
    """
    Abstract base class for all device collectors.

    Subclasses implement ``update()`` as a generator of MetricSample objects.
    One call to ``update()`` is one collection pass.

    Example:
        class MyCollector(BaseDeviceCollector):
            name = "mydevice"

            def update(self) -> Iterator[MetricSample]:
                yield self.sample("temperature", MetricKind.GAUGE, 42.0)
    """

    name = "base"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the collector with optional configuration.

        Args:
            config: Full configuration dictionary
            logger: Logger to use; defaults to ``devmetrics.<name>``
        """
        self.config = config or {}
        self.logger = logger or logging.getLogger(f"devmetrics.{self.name}")
        exporter_config = self.config.get("exporter", {})
        self.namespace = exporter_config.get("namespace", "node")

    @property
    def collector_config(self) -> Dict[str, Any]:
        """Return this collector's section of the configuration."""
        return self.config.get("collectors", {}).get(self.name, {}) or {}

    @abstractmethod
    def update(self) -> Iterator[MetricSample]:
        """
        Run one collection pass.

        Yields:
            MetricSample objects for the current pass

        Raises:
            CollectorError: if the pass failed
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
