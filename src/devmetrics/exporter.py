"""
DevMetrics Exporter

Serves device metrics to Prometheus. Every scrape runs one collection pass
over all enabled collectors and converts their samples into metric
families.

Usage:
    devmetrics [--config path/to/config.yaml] [--port 9835] [--once]
"""

import sys
import time
import signal
import argparse
import threading
import logging
from collections import OrderedDict
from typing import Dict, Any, Iterator, List, Optional

from prometheus_client import CollectorRegistry as PrometheusRegistry
from prometheus_client import generate_latest, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .collectors import BaseDeviceCollector, CollectorError, MetricKind, MetricSample
from .collectors.base_collector import build_fq_name
from .registry import CollectorRegistry, build_collectors
from .utils import load_config, setup_logging

# Module logger
logger = logging.getLogger("devmetrics.exporter")


def samples_to_families(samples: List[MetricSample]) -> List[Metric]:
    """
    Group samples by metric name into Prometheus metric families.

    The first sample of each name fixes the family's kind, help text and
    label names.
    """
    families: "OrderedDict[str, Metric]" = OrderedDict()
    label_names: Dict[str, List[str]] = {}

    for sample in samples:
        family = families.get(sample.name)
        if family is None:
            keys = list(sample.labels)
            family_cls = (
                CounterMetricFamily if sample.kind is MetricKind.COUNTER else GaugeMetricFamily
            )
            family = family_cls(sample.name, sample.documentation, labels=keys)
            families[sample.name] = family
            label_names[sample.name] = keys

        values = [str(sample.labels.get(key, "")) for key in label_names[sample.name]]
        family.add_metric(values, sample.value)

    return list(families.values())


class DeviceMetricsCollector:
    """
    Prometheus custom collector driving all device collectors.

    A collector that fails is reported through the scrape success gauge and
    contributes no samples for that pass; the others still report.
    """

    def __init__(self, collectors: List[BaseDeviceCollector], namespace: str = "node"):
        self.collectors = collectors
        self.namespace = namespace
        self._lock = threading.Lock()

    def describe(self) -> List[Metric]:
        return []

    def _run_collector(self, collector: BaseDeviceCollector) -> Optional[List[MetricSample]]:
        try:
            return list(collector.update())
        except CollectorError as e:
            logger.error(f"Collector {collector.name} failed: {e}")
            return None
        except Exception:
            logger.exception(f"Collector {collector.name} failed unexpectedly")
            return None

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            success = GaugeMetricFamily(
                build_fq_name(self.namespace, "scrape", "collector_success"),
                "Whether a collector succeeded.",
                labels=["collector"],
            )
            duration = GaugeMetricFamily(
                build_fq_name(self.namespace, "scrape", "collector_duration_seconds"),
                "Duration of a collector scrape.",
                labels=["collector"],
            )

            samples: List[MetricSample] = []
            for collector in self.collectors:
                start_time = time.perf_counter()
                result = self._run_collector(collector)
                elapsed = time.perf_counter() - start_time

                duration.add_metric([collector.name], elapsed)
                success.add_metric([collector.name], 0 if result is None else 1)
                logger.debug(f"Collector {collector.name} finished in {elapsed:.3f}s")

                if result:
                    samples.extend(result)

        yield from samples_to_families(samples)
        yield duration
        yield success


def create_registry(
    config: Dict[str, Any],
    collector_registry: Optional[CollectorRegistry] = None,
) -> PrometheusRegistry:
    """Build a Prometheus registry holding the enabled device collectors."""
    collectors = build_collectors(config, collector_registry)
    namespace = config.get("exporter", {}).get("namespace", "node")

    registry = PrometheusRegistry()
    registry.register(DeviceMetricsCollector(collectors, namespace))
    return registry


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the exporter."""
    parser = argparse.ArgumentParser(
        description="DevMetrics Exporter - Network and GPU device metrics for Prometheus"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to serve metrics on (overrides config)",
        default=None
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single collection pass, print the metrics and exit"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.verbose:
        config["debug"]["verbose"] = True
        config["debug"]["log_level"] = "DEBUG"
    setup_logging(config)

    registry = create_registry(config)

    if args.once:
        sys.stdout.write(generate_latest(registry).decode("utf-8"))
        return 0

    exporter_config = config.get("exporter", {})
    port = args.port or exporter_config.get("port", 9835)
    address = exporter_config.get("listen_address", "0.0.0.0")

    # Signal handlers for graceful shutdown
    stop_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Shutdown signal received")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    start_http_server(port, addr=address, registry=registry)
    logger.info(f"Serving metrics on {address}:{port}")

    while not stop_event.is_set():
        stop_event.wait(60)

    logger.info("Exporter stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
