"""
DevMetrics - Network and GPU Device Metrics Exporter

Collects per-device hardware statistics, normalizes vendor-specific records
into a uniform metric model and serves them to Prometheus.

Modules:
    - exporter: Prometheus collector bridge and command-line entry point
    - registry: Explicit table of available device collectors
    - utils: Configuration and logging helpers
    - collectors: Device collectors for network interfaces and NVIDIA GPUs
"""

__version__ = "1.0.0"
__author__ = "DevMetrics Contributors"
__license__ = "Apache-2.0"
