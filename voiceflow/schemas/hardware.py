"""
Hardware snapshot produced by SystemService.probe_hardware().

Capacities are raw byte counts; conversion to GB happens at display time.
Every dataclass is frozen: a detection cycle builds a fresh profile and
nothing mutates it afterwards.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CPUInfo:
    model: str
    physical_cores: int
    logical_threads: int
    architecture: str
    clock_mhz: Optional[float] = None


@dataclass(frozen=True)
class MemoryInfo:
    total_bytes: int = 0
    available_bytes: int = 0
    usage_percent: int = 0


@dataclass(frozen=True)
class GPUInfo:
    available: bool = False
    vendor: Optional[str] = None
    model: Optional[str] = None
    vram_mb: Optional[int] = None
    supports_cuda: bool = False
    supports_opencl: bool = False
    supports_metal: bool = False

    @property
    def features(self):
        names = []
        if self.supports_cuda:
            names.append("CUDA")
        if self.supports_opencl:
            names.append("OpenCL")
        if self.supports_metal:
            names.append("Metal")
        return names


@dataclass(frozen=True)
class DiskInfo:
    total_bytes: int = 0
    available_bytes: int = 0
    usage_percent: int = 0


@dataclass(frozen=True)
class PlatformInfo:
    os: str                         # "linux", "darwin", "windows"
    version: str
    architecture: str               # "x86_64", "arm64", "AMD64"


@dataclass(frozen=True)
class HardwareProfile:
    cpu: CPUInfo
    memory: MemoryInfo
    disk: DiskInfo
    platform: PlatformInfo
    gpu: Optional[GPUInfo] = field(default=None)

    @property
    def has_gpu(self) -> bool:
        return self.gpu is not None and self.gpu.available
