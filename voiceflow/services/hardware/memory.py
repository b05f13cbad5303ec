"""
RAM detection.

Provides total and currently available memory in bytes plus a usage
percentage. psutil is the primary source; /proc/meminfo and sysctl are
fallbacks for environments where psutil cannot read the counters.
"""

import psutil

from voiceflow.config.constants import PROBE_TIMEOUT
from voiceflow.schemas.hardware import MemoryInfo
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.base import DetectionFailedError
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.utils.logger import log
from voiceflow.utils.parse import safe_parse_int


def default_memory() -> MemoryInfo:
    return MemoryInfo(total_bytes=0, available_bytes=0, usage_percent=0)


def detect_memory() -> MemoryInfo:
    """
    Detect RAM capacity.

    Raises:
        DetectionFailedError: If every detection method fails
    """
    try:
        vm = psutil.virtual_memory()
        return _build(vm.total, vm.available)
    except Exception as e:
        log.debug(f"psutil RAM detection failed: {e}")

    system = current_os()
    if system == "linux":
        total, available = _read_meminfo_linux()
        return _build(total, available)
    if system == "darwin":
        return _build(_get_total_ram_macos(), 0)

    raise DetectionFailedError(
        component="RAM",
        message="Could not detect system RAM",
        details=f"psutil failed and no fallback exists for {system}",
    )


def _build(total: int, available: int) -> MemoryInfo:
    total = int(total)
    available = int(available)
    usage = round((total - available) / total * 100) if total > 0 else 0
    return MemoryInfo(total_bytes=total, available_bytes=available, usage_percent=usage)


def _read_meminfo_linux():
    """Return (total, available) bytes from /proc/meminfo (values are kB)."""
    values = {}
    try:
        with open("/proc/meminfo", "r") as f:
            for line in f:
                key, _, rest = line.partition(":")
                parts = rest.split()
                if parts:
                    values[key] = int(parts[0]) * 1024
    except (OSError, ValueError) as e:
        raise DetectionFailedError("RAM", "Could not detect RAM on Linux", str(e))

    if "MemTotal" not in values:
        raise DetectionFailedError("RAM", "Could not detect RAM on Linux", "MemTotal missing")
    return values["MemTotal"], values.get("MemAvailable", values.get("MemFree", 0))


def _get_total_ram_macos() -> int:
    total = safe_parse_int(CommandRunner.try_run(["sysctl", "-n", "hw.memsize"], timeout=PROBE_TIMEOUT))
    if total > 0:
        return total

    raise DetectionFailedError(
        component="RAM",
        message="Could not detect RAM on macOS",
        details="sysctl hw.memsize failed",
    )
