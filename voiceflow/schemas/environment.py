from dataclasses import dataclass, field
from typing import Optional

from voiceflow.schemas.dependencies import DependencySet
from voiceflow.schemas.hardware import HardwareProfile


@dataclass
class EnvironmentReport:
    """Output of EnvironmentService.detect_environment()"""

    platform: str                   # "linux", "darwin", "windows"
    arch: str                       # "x86_64", "arm64"
    python_version: str             # "3.12.1"
    memory_gb: int                  # rounded total RAM
    hardware: HardwareProfile
    dependencies: DependencySet = field(default_factory=dict)

    # None when the check was skipped
    network_ok: Optional[bool] = None
