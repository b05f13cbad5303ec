"""
Disk detection for the volume holding the current working directory.
"""

import os
import re
import shutil
from typing import Optional

from voiceflow.config.constants import PROBE_TIMEOUT
from voiceflow.schemas.hardware import DiskInfo
from voiceflow.services.command_runner import CommandRunner
from voiceflow.services.hardware.platform_info import current_os
from voiceflow.utils.logger import log
from voiceflow.utils.parse import safe_parse_int
from voiceflow.utils.units import parse_size


def default_disk() -> DiskInfo:
    return DiskInfo(total_bytes=0, available_bytes=0, usage_percent=0)


def detect_disk(path: str = ".") -> DiskInfo:
    if current_os() in ("linux", "darwin"):
        output = CommandRunner.try_run(["df", "-k", path], timeout=PROBE_TIMEOUT)
        disk = parse_df(output) if output else None
        if disk is not None:
            return disk
        log.debug("df parsing failed, falling back to shutil.disk_usage")
    elif current_os() == "windows":
        disk = _detect_disk_windows(path)
        if disk is not None:
            return disk
        log.debug("wmic parsing failed, falling back to shutil.disk_usage")

    return _disk_usage(path)


def _detect_disk_windows(path: str) -> Optional[DiskInfo]:
    drive = os.path.splitdrive(os.path.abspath(path))[0]
    if not drive:
        return None
    output = CommandRunner.try_run(
        ["wmic", "logicaldisk", "where", f"DeviceID='{drive}'", "get", "FreeSpace,Size", "/format:csv"],
        timeout=PROBE_TIMEOUT * 2,
    )
    return parse_wmic_disk(output) if output else None


def _disk_usage(path: str) -> DiskInfo:
    total, used, free = shutil.disk_usage(os.path.abspath(path))
    return _build(total, used, free)


def _build(total: int, used: int, available: int) -> DiskInfo:
    usage = round(used / total * 100) if total > 0 else 0
    return DiskInfo(total_bytes=int(total), available_bytes=int(available), usage_percent=usage)


def parse_df_value(value: str, block_size: int = 1024) -> Optional[int]:
    """
    A df column is either a block count or a human-readable size
    (``-h`` style output, e.g. ``"228Gi"`` or ``"1.5T"``).
    """
    value = value.strip()
    if value.isdigit():
        return int(value) * block_size
    # macOS df -h uses "Gi"/"Ti" suffixes
    normalized = re.sub(r"([KMGT])i$", r"\1iB", value, flags=re.IGNORECASE)
    return parse_size(normalized)


def parse_df(output: str, block_size: int = 1024) -> Optional[DiskInfo]:
    """
    Parse ``df`` output: header line, then one data line whose
    2nd/3rd/4th columns are total/used/available. Long device names
    wrap onto their own line on some systems; the columns are then joined.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        return None

    parts = " ".join(lines[1:]).split()
    if len(parts) < 4:
        return None

    total = parse_df_value(parts[1], block_size)
    used = parse_df_value(parts[2], block_size)
    available = parse_df_value(parts[3], block_size)
    if total is None or used is None or available is None or total <= 0:
        return None
    return _build(total, used, available)


def parse_wmic_disk(output: str) -> Optional[DiskInfo]:
    """Parse ``Node,FreeSpace,Size`` CSV; both values are in bytes."""
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        return None

    header = [h.strip().lower() for h in lines[0].split(",")]
    row = [c.strip() for c in lines[1].split(",")]
    if len(row) != len(header):
        return None
    fields = dict(zip(header, row))

    total = safe_parse_int(fields.get("size"))
    available = safe_parse_int(fields.get("freespace"))
    if total <= 0:
        return None
    return _build(total, total - available, available)
