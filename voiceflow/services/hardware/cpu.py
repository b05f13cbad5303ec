"""
CPU detection.

The baseline comes from psutil/os and is always available; a
platform-specific enrichment pass overlays the marketing model name and
the physical core count when the OS exposes them. Enrichment failures are
ignored and the baseline stands.
"""

import os
import platform
import re
from dataclasses import replace
from typing import Dict

import psutil

from voiceflow.config.constants import PROBE_TIMEOUT
from voiceflow.schemas.hardware import CPUInfo
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.utils.logger import log
from voiceflow.utils.parse import safe_parse_int


def default_cpu() -> CPUInfo:
    return CPUInfo(
        model="unknown",
        physical_cores=1,
        logical_threads=1,
        architecture=platform.machine(),
    )


def detect_cpu() -> CPUInfo:
    cpu = _baseline_cpu()

    system = current_os()
    try:
        if system == "darwin":
            updates = _detect_cpu_macos()
        elif system == "linux":
            updates = _detect_cpu_linux()
        elif system == "windows":
            updates = _detect_cpu_windows()
        else:
            updates = {}
    except Exception as e:
        log.debug(f"CPU enrichment failed on {system}: {e}")
        updates = {}

    return replace(cpu, **updates) if updates else cpu


def _baseline_cpu() -> CPUInfo:
    logical = psutil.cpu_count(logical=True) or os.cpu_count() or 1

    clock_mhz = None
    try:
        freq = psutil.cpu_freq()
        if freq and freq.max:
            clock_mhz = float(freq.max)
        elif freq and freq.current:
            clock_mhz = float(freq.current)
    except Exception as e:
        log.debug(f"psutil cpu_freq failed: {e}")

    return CPUInfo(
        model=platform.processor() or "unknown",
        # Node-style baseline: logical count until enrichment says otherwise
        physical_cores=logical,
        logical_threads=logical,
        architecture=platform.machine(),
        clock_mhz=clock_mhz,
    )


def _detect_cpu_macos() -> Dict:
    updates = {}

    brand = CommandRunner.try_run(["sysctl", "-n", "machdep.cpu.brand_string"], timeout=PROBE_TIMEOUT)
    if brand:
        updates["model"] = brand

    cores = CommandRunner.try_run(["sysctl", "-n", "hw.physicalcpu"], timeout=PROBE_TIMEOUT)
    threads = CommandRunner.try_run(["sysctl", "-n", "hw.logicalcpu"], timeout=PROBE_TIMEOUT)
    if cores and threads:
        physical = safe_parse_int(cores)
        logical = safe_parse_int(threads)
        if physical > 0 and logical > 0:
            updates["physical_cores"] = physical
            updates["logical_threads"] = logical

    return updates


def _detect_cpu_linux() -> Dict:
    output = CommandRunner.try_run(["lscpu"], timeout=PROBE_TIMEOUT)
    if not output:
        return _detect_cpu_linux_proc()
    return parse_lscpu(output)


def parse_lscpu(output: str) -> Dict:
    """Extract model name and physical cores (cores per socket * sockets)."""
    updates = {}

    model_match = re.search(r"^\s*Model name:\s*(.+)$", output, re.IGNORECASE | re.MULTILINE)
    if model_match:
        updates["model"] = model_match.group(1).strip()

    core_match = re.search(r"^\s*Core\(s\) per socket:\s*(\d+)", output, re.IGNORECASE | re.MULTILINE)
    socket_match = re.search(r"^\s*Socket\(s\):\s*(\d+)", output, re.IGNORECASE | re.MULTILINE)
    if core_match and socket_match:
        physical = safe_parse_int(core_match.group(1)) * safe_parse_int(socket_match.group(1))
        if physical > 0:
            updates["physical_cores"] = physical

    return updates


def _detect_cpu_linux_proc() -> Dict:
    try:
        with open("/proc/cpuinfo", "r") as f:
            return parse_proc_cpuinfo(f.read())
    except OSError as e:
        log.debug(f"/proc/cpuinfo unreadable: {e}")
        return {}


def parse_proc_cpuinfo(content: str) -> Dict:
    updates = {}
    for line in content.splitlines():
        if line.lower().startswith("model name"):
            _, _, value = line.partition(":")
            if value.strip():
                updates["model"] = value.strip()
                break

    physical_ids = set()
    for block in content.split("\n\n"):
        phys = re.search(r"^physical id\s*:\s*(\d+)", block, re.MULTILINE)
        core = re.search(r"^core id\s*:\s*(\d+)", block, re.MULTILINE)
        if phys and core:
            physical_ids.add((phys.group(1), core.group(1)))
    if physical_ids:
        updates["physical_cores"] = len(physical_ids)

    return updates


def _detect_cpu_windows() -> Dict:
    updates = {}
    physical = psutil.cpu_count(logical=False)
    if physical:
        updates["physical_cores"] = physical

    # PROCESSOR_IDENTIFIER is only a family string; prefer the registry name via wmic
    output = CommandRunner.try_run(["wmic", "cpu", "get", "name"], timeout=PROBE_TIMEOUT)
    if output:
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if len(lines) >= 2:
            updates["model"] = lines[1]
    return updates
