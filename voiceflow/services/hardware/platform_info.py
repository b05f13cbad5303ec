"""
Platform detection. Built only from ``platform`` module primitives, so it
cannot fail.
"""

import platform

from voiceflow.schemas.hardware import PlatformInfo


def current_os() -> str:
    """Normalized OS key: "linux", "darwin", "windows" or the raw lowercase name."""
    return platform.system().lower() or "unknown"


def detect_platform() -> PlatformInfo:
    return PlatformInfo(
        os=current_os(),
        version=platform.release(),
        architecture=platform.machine(),
    )


default_platform = detect_platform
