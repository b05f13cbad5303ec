from dataclasses import dataclass
from enum import Enum


class ModelSize(str, Enum):
    BASE = "base"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def rank(self) -> int:
        return list(ModelSize).index(self)


class Backend(str, Enum):
    CPU = "cpu"
    CUDA = "cuda"
    OPENCL = "opencl"
    METAL = "metal"


@dataclass(frozen=True)
class Recommendation:
    """Whisper.cpp runtime configuration derived from a HardwareProfile."""

    use_acceleration: bool
    thread_count: int
    model_size: ModelSize
    backend: Backend
