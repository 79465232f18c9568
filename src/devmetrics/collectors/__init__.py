"""
Device Collectors Module

Each collector enumerates one device type through its platform API and
yields typed metric samples. New device types can be added by subclassing
BaseDeviceCollector and adding the class to the collector registry.

Available Collectors:
    - netdev_collector: Network interface counters via psutil
    - gpu_collector: NVIDIA GPU telemetry via pynvml
"""

from .base_collector import (
    BaseDeviceCollector,
    CollectorError,
    ConfigurationError,
    MetricKind,
    MetricSample,
    NormalizationError,
    PlatformQueryError,
    VendorAPIUnavailable,
    VendorReadError,
)
from .device_filter import DeviceFilter
from .normalizer import normalize_stats
from .netdev_collector import NetDevCollector, parse_net_dev_stats
from .gpu_collector import GPUCollector, GPUDevice, GPUMetrics, collect_gpu_metrics

__all__ = [
    "BaseDeviceCollector",
    "CollectorError",
    "ConfigurationError",
    "MetricKind",
    "MetricSample",
    "NormalizationError",
    "PlatformQueryError",
    "VendorAPIUnavailable",
    "VendorReadError",
    "DeviceFilter",
    "normalize_stats",
    "NetDevCollector",
    "parse_net_dev_stats",
    "GPUCollector",
    "GPUDevice",
    "GPUMetrics",
    "collect_gpu_metrics",
]
