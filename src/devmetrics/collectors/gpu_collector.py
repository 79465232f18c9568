"""
NVIDIA GPU Device Collector

Collects GPU telemetry from NVIDIA GPUs using pynvml (NVIDIA Management
Library). NVML is initialized at the start of each pass and shut down at
the end of the same pass, whatever the outcome.
"""

import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Any, Iterator, List, Optional

try:
    import pynvml
    HAS_PYNVML = True
except ImportError:
    HAS_PYNVML = False

from .base_collector import (
    BaseDeviceCollector,
    MetricKind,
    MetricSample,
    VendorAPIUnavailable,
    VendorReadError,
    build_fq_name,
)

DEFAULT_AVERAGE_WINDOW = 10.0

GPU_LABELS = ("minornumber", "name", "uuid", "system_driver_version")

logger = logging.getLogger("devmetrics.gpu")


@dataclass(frozen=True)
class GPUDevice:
    """Telemetry snapshot of one physical GPU."""
    index: str
    minor_number: str
    name: str
    uuid: str
    temperature: float
    power_usage: float
    fan_speed: float
    memory_total: float
    memory_used: float
    utilization_memory: float
    utilization_gpu: float
    utilization_gpu_average: float


@dataclass
class GPUMetrics:
    """Driver version plus the devices read in one pass, in index order."""
    version: str
    devices: List[GPUDevice] = field(default_factory=list)


# (attribute, metric suffix, kind, help text)
GPU_METRICS = [
    ("temperature", "Temperature", MetricKind.GAUGE,
     "Temperature of GPU device in system"),
    ("power_usage", "PowerUsage", MetricKind.GAUGE,
     "Power Usage of GPU device in system"),
    ("fan_speed", "FanSpeed", MetricKind.GAUGE,
     "Fan Speed of GPU device in system"),
    ("memory_total", "MemoryTotal_Bytes", MetricKind.COUNTER,
     "Memory Total of GPU device in system"),
    ("memory_used", "MemoryUsed_Bytes", MetricKind.GAUGE,
     "Memory Used of GPU device in system"),
    ("utilization_memory", "UtilizationMemory", MetricKind.GAUGE,
     "Utilization Memory of GPU device in system"),
    ("utilization_gpu", "UtilizationGPU", MetricKind.GAUGE,
     "Utilization of GPU device in system"),
    ("utilization_gpu_average", "UtilizationGPUAverage", MetricKind.GAUGE,
     "Utilization Average of GPU device in system"),
]


def _decode(value: Any) -> str:
    # Older pynvml releases return bytes
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


@contextmanager
def nvml_session():
    """
    Hold NVML open for the duration of a ``with`` block.

    Raises:
        VendorAPIUnavailable: if pynvml is missing or NVML cannot initialize
    """
    if not HAS_PYNVML:
        raise VendorAPIUnavailable("pynvml is not installed")

    try:
        pynvml.nvmlInit()
    except pynvml.NVMLError as e:
        raise VendorAPIUnavailable(f"NVML initialization failed: {e}") from e

    try:
        yield
    finally:
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as e:
            logger.debug(f"NVML shutdown failed: {e}")


def _read(what: str, func, *args):
    """Call an NVML function, mapping NVML failures to VendorReadError."""
    try:
        return func(*args)
    except pynvml.NVMLError as e:
        raise VendorReadError(f"Failed to read {what}: {e}") from e


def average_gpu_utilization(handle: Any, window: float = DEFAULT_AVERAGE_WINDOW) -> float:
    """
    Average of the GPU utilization samples NVML buffered over the last
    ``window`` seconds.
    """
    since_us = int((time.time() - window) * 1_000_000)
    _, samples = _read(
        "average GPU utilization",
        pynvml.nvmlDeviceGetSamples,
        handle,
        pynvml.NVML_GPU_UTILIZATION_SAMPLES,
        since_us,
    )
    if not samples:
        return 0.0
    total = sum(sample.sampleValue.uiVal for sample in samples)
    return float(total // len(samples))


def read_gpu_device(index: int, average_window: float = DEFAULT_AVERAGE_WINDOW) -> GPUDevice:
    """Read every telemetry field of the GPU at ``index``."""
    handle = _read(f"handle of device {index}", pynvml.nvmlDeviceGetHandleByIndex, index)

    uuid = _decode(_read("UUID", pynvml.nvmlDeviceGetUUID, handle))
    name = _decode(_read("name", pynvml.nvmlDeviceGetName, handle))
    minor_number = _read("minor number", pynvml.nvmlDeviceGetMinorNumber, handle)
    temperature = _read(
        "temperature", pynvml.nvmlDeviceGetTemperature, handle, pynvml.NVML_TEMPERATURE_GPU
    )
    power_usage = _read("power usage", pynvml.nvmlDeviceGetPowerUsage, handle)
    fan_speed = _read("fan speed", pynvml.nvmlDeviceGetFanSpeed, handle)
    memory = _read("memory info", pynvml.nvmlDeviceGetMemoryInfo, handle)
    utilization = _read("utilization rates", pynvml.nvmlDeviceGetUtilizationRates, handle)
    utilization_average = average_gpu_utilization(handle, average_window)

    return GPUDevice(
        index=str(index),
        minor_number=str(int(minor_number)),
        name=name,
        uuid=uuid,
        temperature=float(temperature),
        power_usage=float(power_usage),
        fan_speed=float(fan_speed),
        memory_total=float(memory.total),
        memory_used=float(memory.used),
        utilization_memory=float(utilization.memory),
        utilization_gpu=float(utilization.gpu),
        utilization_gpu_average=utilization_average,
    )


def collect_gpu_metrics(average_window: float = DEFAULT_AVERAGE_WINDOW) -> GPUMetrics:
    """
    Enumerate all GPUs and read their telemetry in one NVML session.

    Returns:
        GPUMetrics with every device, in index order

    Raises:
        VendorAPIUnavailable: NVML could not be initialized
        VendorReadError: any read failed; no partial device list is returned
    """
    with nvml_session():
        version = _decode(_read("driver version", pynvml.nvmlSystemGetDriverVersion))
        count = _read("device count", pynvml.nvmlDeviceGetCount)

        devices = [read_gpu_device(index, average_window) for index in range(count)]
        return GPUMetrics(version=version, devices=devices)


class GPUCollector(BaseDeviceCollector):
    """
    NVIDIA GPU metrics collector using pynvml.

    Collects per GPU:
        - Temperature
        - Power usage (milliwatts)
        - Fan speed percentage
        - Memory total/used (bytes)
        - GPU and memory utilization percentage
        - Average GPU utilization over a trailing window
    """

    name = "gpu"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(config, logger)
        self.average_window = float(
            self.collector_config.get("average_window_seconds", DEFAULT_AVERAGE_WINDOW)
        )

    def collect(self) -> Optional[GPUMetrics]:
        """
        Run one pass. Returns None when no GPU or driver is available.
        """
        try:
            return collect_gpu_metrics(self.average_window)
        except VendorAPIUnavailable as e:
            self.logger.debug(f"gpu information is unavailable to collect: {e}")
            return None

    def update(self) -> Iterator[MetricSample]:
        gpu = self.collect()
        if gpu is None:
            return

        for device in gpu.devices:
            labels = dict(zip(
                GPU_LABELS,
                (device.minor_number, device.name, device.uuid, gpu.version),
            ))
            for attr, suffix, kind, documentation in GPU_METRICS:
                yield MetricSample(
                    name=build_fq_name(self.namespace, "gpu", suffix),
                    kind=kind,
                    value=getattr(device, attr),
                    labels=labels,
                    documentation=documentation,
                )
