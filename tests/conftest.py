import os
import tempfile

import pytest

# Keep config and log files out of the real home directory; must run
# before any voiceflow module is imported.
os.environ.setdefault("VOICEFLOW_HOME", tempfile.mkdtemp(prefix="voiceflow-tests-"))
os.environ.pop("VOICEFLOW_DEBUG", None)
os.environ.pop("DEBUG", None)

from voiceflow.schemas.hardware import (
    CPUInfo,
    DiskInfo,
    GPUInfo,
    HardwareProfile,
    MemoryInfo,
    PlatformInfo,
)

GIB = 1024 ** 3


@pytest.fixture
def make_profile():
    """Factory for HardwareProfile with sensible defaults."""

    def _make(cores=4, memory_gb=8, gpu=None, disk_free_gb=100, os_name="linux", arch="x86_64"):
        return HardwareProfile(
            cpu=CPUInfo(model="Test CPU", physical_cores=cores, logical_threads=cores * 2, architecture=arch),
            memory=MemoryInfo(total_bytes=int(memory_gb * GIB), available_bytes=int(memory_gb * GIB) // 2,
                              usage_percent=50),
            disk=DiskInfo(total_bytes=500 * GIB, available_bytes=int(disk_free_gb * GIB), usage_percent=50),
            platform=PlatformInfo(os=os_name, version="1.0", architecture=arch),
            gpu=gpu,
        )

    return _make


@pytest.fixture
def metal_gpu():
    return GPUInfo(available=True, vendor="Apple", model="Apple M2 Pro", supports_metal=True)


@pytest.fixture
def cuda_gpu():
    return GPUInfo(available=True, vendor="NVIDIA", model="RTX 3080", vram_mb=10240, supports_cuda=True)
