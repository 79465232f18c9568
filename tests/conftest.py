"""
Pytest Configuration and Fixtures

Provides shared fixtures and configuration for all tests.
"""

import os
import sys
import tempfile
from collections import namedtuple
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from devmetrics.utils import get_default_config


# Same shape as psutil's per-interface counters
snetio = namedtuple(
    "snetio",
    ["bytes_sent", "bytes_recv", "packets_sent", "packets_recv",
     "errin", "errout", "dropin", "dropout"],
)


class FakeNVMLError(Exception):
    """Stand-in for pynvml.NVMLError in tests."""


class FakeNVML:
    """
    In-memory NVML used to drive the GPU collector.

    ``fail`` maps (device index, field) to an error message; reading that
    field raises FakeNVMLError.
    """

    NVMLError = FakeNVMLError
    NVML_TEMPERATURE_GPU = 0
    NVML_GPU_UTILIZATION_SAMPLES = 1

    def __init__(self, devices, driver_version="535.104.05", init_error=None, fail=None):
        self.devices = devices
        self.driver_version = driver_version
        self.init_error = init_error
        self.fail = fail or {}
        self.init_calls = 0
        self.shutdown_calls = 0
        self.sample_timestamps = []

    def _get(self, handle, key):
        if (handle, key) in self.fail:
            raise FakeNVMLError(self.fail[(handle, key)])
        return self.devices[handle][key]

    def nvmlInit(self):
        self.init_calls += 1
        if self.init_error:
            raise FakeNVMLError(self.init_error)

    def nvmlShutdown(self):
        self.shutdown_calls += 1

    def nvmlSystemGetDriverVersion(self):
        return self.driver_version

    def nvmlDeviceGetCount(self):
        return len(self.devices)

    def nvmlDeviceGetHandleByIndex(self, index):
        if (index, "handle") in self.fail:
            raise FakeNVMLError(self.fail[(index, "handle")])
        return index

    def nvmlDeviceGetUUID(self, handle):
        return self._get(handle, "uuid")

    def nvmlDeviceGetName(self, handle):
        return self._get(handle, "name")

    def nvmlDeviceGetMinorNumber(self, handle):
        return self._get(handle, "minor_number")

    def nvmlDeviceGetTemperature(self, handle, sensor):
        assert sensor == self.NVML_TEMPERATURE_GPU
        return self._get(handle, "temperature")

    def nvmlDeviceGetPowerUsage(self, handle):
        return self._get(handle, "power_usage")

    def nvmlDeviceGetFanSpeed(self, handle):
        return self._get(handle, "fan_speed")

    def nvmlDeviceGetMemoryInfo(self, handle):
        total, used = self._get(handle, "memory")
        return SimpleNamespace(total=total, used=used, free=total - used)

    def nvmlDeviceGetUtilizationRates(self, handle):
        gpu, memory = self._get(handle, "utilization")
        return SimpleNamespace(gpu=gpu, memory=memory)

    def nvmlDeviceGetSamples(self, handle, sampling_type, timestamp):
        assert sampling_type == self.NVML_GPU_UTILIZATION_SAMPLES
        self.sample_timestamps.append(timestamp)
        values = self._get(handle, "samples")
        samples = [
            SimpleNamespace(timeStamp=timestamp + i, sampleValue=SimpleNamespace(uiVal=v))
            for i, v in enumerate(values)
        ]
        return 0, samples


def make_gpu(index=0, **overrides):
    """Build the raw NVML readings of one fake GPU."""
    device = {
        "uuid": f"GPU-0000000{index}-aaaa-bbbb-cccc-dddddddddddd",
        "name": "NVIDIA A100-SXM4-40GB",
        "minor_number": index,
        "temperature": 45,
        "power_usage": 62000,
        "fan_speed": 30,
        "memory": (42949672960, 1073741824),
        "utilization": (75, 40),
        "samples": [70, 80, 90],
    }
    device.update(overrides)
    return device


@pytest.fixture
def default_config():
    """Provide default configuration."""
    return get_default_config()


@pytest.fixture
def temp_config_file():
    """Provide temporary config file."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write("exporter:\n  port: 9999\n")
        temp_path = f.name

    yield temp_path

    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def net_counters():
    """Provide per-interface counters as psutil returns them."""
    return {
        "eth0": snetio(100, 200, 10, 20, 0, 1, 2, 3),
        "lo": snetio(5000, 5000, 50, 50, 0, 0, 0, 0),
        "wlan0": snetio(7, 8, 1, 2, 0, 0, 0, 0),
    }


@pytest.fixture
def fake_nvml():
    """Provide a two-GPU fake NVML."""
    return FakeNVML([make_gpu(0), make_gpu(1, name="NVIDIA T4", temperature=60)])
