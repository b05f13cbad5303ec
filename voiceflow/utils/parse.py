import re
from typing import Optional

UNKNOWN_VERSION = "unknown version"

_VERSION_RE = re.compile(r"v?(\d+\.\d+(?:\.\d+)?)", re.IGNORECASE)


def safe_parse_int(value: Optional[str], default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def safe_parse_float(value: Optional[str], default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(str(value).strip())
    except ValueError:
        return default


def extract_version(output: Optional[str]) -> str:
    """First ``x.y`` or ``x.y.z`` token (optionally v-prefixed) in ``output``."""
    if not output:
        return UNKNOWN_VERSION
    match = _VERSION_RE.search(output)
    return match.group(1) if match else UNKNOWN_VERSION
