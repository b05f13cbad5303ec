import re
from typing import Dict, Optional, Tuple

BYTE_UNITS: Dict[str, int] = {
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}

_DISPLAY_ORDER = (("TB", BYTE_UNITS["TB"]), ("GB", BYTE_UNITS["GB"]),
                  ("MB", BYTE_UNITS["MB"]), ("KB", BYTE_UNITS["KB"]), ("B", 1))

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?)(i?)(B?)\s*$", re.IGNORECASE)
_PREFIX_POWER = {"": 0, "K": 1, "M": 2, "G": 3, "T": 4}


def convert_bytes(num_bytes: float, unit: str, precision: int = 2) -> float:
    """Convert a byte count to ``unit`` (KB, MB, GB or TB, binary multiples)."""
    if num_bytes == 0:
        return 0
    return round(num_bytes / BYTE_UNITS[unit], precision)


def to_kb(num_bytes: float, precision: int = 2) -> float:
    return convert_bytes(num_bytes, "KB", precision)


def to_mb(num_bytes: float, precision: int = 2) -> float:
    return convert_bytes(num_bytes, "MB", precision)


def to_gb(num_bytes: float, precision: int = 2) -> float:
    return convert_bytes(num_bytes, "GB", precision)


def to_tb(num_bytes: float, precision: int = 2) -> float:
    return convert_bytes(num_bytes, "TB", precision)


def auto_convert_bytes(num_bytes: float, precision: int = 2) -> Tuple[float, str]:
    """Pick the largest unit in which the value is at least 1."""
    if num_bytes <= 0:
        return 0, "B"
    for unit, divisor in _DISPLAY_ORDER:
        value = num_bytes / divisor
        if value >= 1:
            if unit == "B":
                return round(value), unit
            return round(value, precision), unit
    return 0, "B"


def format_bytes(num_bytes: float, precision: int = 2) -> str:
    """
    Human readable size, e.g. ``"1.5 GB"`` or ``"512 B"``.

    Trailing zeros are dropped so 1 GiB renders as ``"1 GB"``.
    """
    value, unit = auto_convert_bytes(num_bytes, precision)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value} {unit}"


def parse_size(text: str) -> Optional[int]:
    """
    Parse a human-readable size into bytes.

    ``K``/``KiB`` style suffixes are binary; an explicit ``KB`` style
    suffix (letter followed by ``B`` without ``i``) is decimal. A bare
    number is bytes. Returns None for unparseable input.
    """
    if not text:
        return None
    match = _SIZE_RE.match(text)
    if not match:
        return None
    number, prefix, binary_marker, byte_marker = match.groups()
    prefix = prefix.upper()
    power = _PREFIX_POWER[prefix]
    if prefix and byte_marker and not binary_marker:
        base = 1000
    else:
        base = 1024
    return int(round(float(number) * base ** power))
