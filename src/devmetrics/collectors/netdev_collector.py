"""
Network Device Collector

Collects per-interface I/O counters via psutil and exposes every counter
the platform reports as ``<namespace>_network_<field>_total``.
"""

import logging
from typing import Dict, Any, Iterable, Iterator, Optional, Tuple

import psutil

from .base_collector import (
    BaseDeviceCollector,
    MetricKind,
    MetricSample,
    PlatformQueryError,
    build_fq_name,
)
from .device_filter import DeviceFilter
from .normalizer import normalize_stats

NetDevStats = Dict[str, Dict[str, int]]

logger = logging.getLogger("devmetrics.netdev")


def get_net_dev_records() -> Iterable[Tuple[str, Any]]:
    """Query psutil for the full, unfiltered per-interface counter list."""
    try:
        counters = psutil.net_io_counters(pernic=True, nowrap=True)
    except Exception as e:
        raise PlatformQueryError(f"Failed to query network interfaces: {e}") from e
    return list(counters.items())


def parse_net_dev_stats(
    records: Iterable[Tuple[str, Any]],
    device_filter: DeviceFilter,
    log: Optional[logging.Logger] = None,
) -> NetDevStats:
    """
    Filter and normalize interface records.

    Args:
        records: (interface name, counters) pairs as returned by the platform
        device_filter: Filter deciding which interfaces are skipped
        log: Logger for skipped devices

    Returns:
        Mapping of interface name to its normalized counters

    Raises:
        NormalizationError: if any retained record cannot be normalized
    """
    log = log or logger
    net_dev: NetDevStats = {}

    for dev, counters in records:
        if device_filter.ignored(dev):
            log.debug(f"Ignoring device {dev}")
            continue

        net_dev[dev] = normalize_stats(counters)

    return net_dev


class NetDevCollector(BaseDeviceCollector):
    """
    Network interface metrics collector.

    Collects whatever psutil reports per interface, typically:
        - bytes sent/received
        - packets sent/received
        - errors in/out
        - drops in/out
    """

    name = "netdev"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        device_filter: Optional[DeviceFilter] = None,
    ):
        super().__init__(config, logger)
        self.device_filter = device_filter or DeviceFilter.from_config(self.collector_config)

    def collect(self) -> NetDevStats:
        """Run one pass and return normalized stats for retained interfaces."""
        return parse_net_dev_stats(get_net_dev_records(), self.device_filter, self.logger)

    def update(self) -> Iterator[MetricSample]:
        stats = self.collect()
        for dev, dev_stats in stats.items():
            for key, value in dev_stats.items():
                yield MetricSample(
                    name=build_fq_name(self.namespace, "network", key, "total"),
                    kind=MetricKind.COUNTER,
                    value=float(value),
                    labels={"device": dev},
                    documentation=f"Network device statistic {key}.",
                )
