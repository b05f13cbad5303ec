"""
GPU detection.

Each OS has its own strategy:
- macOS: system_profiler SPDisplaysDataType (Metal is always available)
- Linux: nvidia-smi (CUDA), else lspci VGA/3D controllers; clinfo for OpenCL
- Windows: wmic win32_VideoController

Returns None when no GPU is found; that is a normal outcome, not an error.
"""

import re
from dataclasses import replace
from typing import Dict, Optional

from voiceflow.config.constants import PROBE_TIMEOUT
from voiceflow.schemas.hardware import GPUInfo
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.utils.logger import log
from voiceflow.utils.parse import safe_parse_int


def default_gpu() -> Optional[GPUInfo]:
    return None


def detect_gpu() -> Optional[GPUInfo]:
    gpu = GPUInfo()
    system = current_os()

    try:
        if system == "darwin":
            updates = _detect_gpu_macos()
        elif system == "linux":
            updates = _detect_gpu_linux()
        elif system == "windows":
            updates = _detect_gpu_windows()
        else:
            updates = {}
    except Exception as e:
        log.debug(f"GPU detection failed on {system}: {e}")
        updates = {}

    if updates:
        gpu = replace(gpu, **updates)
    return gpu if gpu.available else None


def detect_gpu_vendor(model: Optional[str]) -> Optional[str]:
    if not model:
        return None
    lower = model.lower()
    if "intel" in lower:
        return "Intel"
    if "amd" in lower or "radeon" in lower or "advanced micro devices" in lower:
        return "AMD"
    if "nvidia" in lower or "geforce" in lower:
        return "NVIDIA"
    if "apple" in lower:
        return "Apple"
    return None


def _detect_gpu_macos() -> Dict:
    output = CommandRunner.try_run(["system_profiler", "SPDisplaysDataType"], timeout=PROBE_TIMEOUT * 2)
    if not output:
        return {}
    return parse_system_profiler(output)


def parse_system_profiler(output: str) -> Dict:
    updates = {}
    chipset = re.search(r"Chipset Model:\s*(.+)", output, re.IGNORECASE)
    if chipset:
        model = chipset.group(1).strip()
        updates.update(
            available=True,
            model=model,
            vendor=detect_gpu_vendor(model),
            supports_metal=True,
        )

    vram = re.search(r"VRAM \((?:Total|Dynamic, Max)\):\s*(\d+)\s*(MB|GB)", output, re.IGNORECASE)
    if vram:
        amount = safe_parse_int(vram.group(1))
        updates["vram_mb"] = amount * 1024 if vram.group(2).upper() == "GB" else amount

    return updates


def _detect_gpu_linux() -> Dict:
    updates = {}

    nvidia = CommandRunner.try_run(
        ["nvidia-smi", "--query-gpu=name,memory.total", "--format=csv,noheader,nounits"],
        timeout=PROBE_TIMEOUT,
    )
    if nvidia:
        updates.update(parse_nvidia_smi(nvidia))
    else:
        lspci = CommandRunner.try_run(["lspci"], timeout=PROBE_TIMEOUT)
        if lspci:
            updates.update(parse_lspci(lspci))

    if CommandRunner.try_run(["clinfo"], timeout=PROBE_TIMEOUT):
        updates["supports_opencl"] = True

    return updates


def parse_nvidia_smi(output: str) -> Dict:
    first = output.strip().splitlines()[0] if output.strip() else ""
    if not first:
        return {}
    name, _, memory = (part.strip() for part in first.partition(","))
    return {
        "available": True,
        "vendor": "NVIDIA",
        "model": name,
        "vram_mb": safe_parse_int(memory) or None,
        "supports_cuda": True,
    }


def parse_lspci(output: str) -> Dict:
    lines = [
        line for line in output.splitlines()
        if re.search(r"vga|3d controller|display controller", line, re.IGNORECASE)
    ]
    if not lines:
        return {}
    line = lines[0]
    vendor = detect_gpu_vendor(line)
    # Virtual adapters (QXL, Cirrus, VMware SVGA) are not accelerators
    if vendor is None:
        return {}
    _, _, description = line.partition(": ")
    model = description.strip() or line.strip()
    return {
        "available": True,
        "vendor": vendor,
        "model": model,
    }


def _detect_gpu_windows() -> Dict:
    output = CommandRunner.try_run(
        ["wmic", "path", "win32_VideoController", "get", "name,AdapterRAM", "/format:csv"],
        timeout=PROBE_TIMEOUT * 2,
    )
    if not output:
        return {}
    return parse_wmic_video(output)


def parse_wmic_video(output: str) -> Dict:
    """Parse ``Node,AdapterRAM,Name`` CSV; AdapterRAM is in bytes."""
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        return {}

    header = [h.strip().lower() for h in lines[0].split(",")]
    row = [c.strip() for c in lines[1].split(",")]
    if len(row) != len(header):
        return {}
    fields = dict(zip(header, row))

    model = fields.get("name")
    if not model:
        return {}

    updates = {
        "available": True,
        "model": model,
        "vendor": detect_gpu_vendor(model),
    }
    adapter_ram = safe_parse_int(fields.get("adapterram"))
    if adapter_ram > 0:
        updates["vram_mb"] = adapter_ram // (1024 * 1024)
    if updates["vendor"] == "NVIDIA":
        updates["supports_cuda"] = True
    return updates
