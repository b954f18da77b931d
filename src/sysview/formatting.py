"""Display formatting helpers."""

import math
from typing import Any

PLACEHOLDER = "--"
_UNITS = ("B", "KB", "MB", "GB")


def scale_bytes(size: float) -> str:
    """Format bytes as human-readable string. Past GB the unit is dropped."""
    value = float(size)
    if not math.isfinite(value):
        return f"{value:.1f}"
    steps = 0
    while value >= 1024:
        value /= 1024
        steps += 1
    unit = _UNITS[steps] if steps < len(_UNITS) else ""
    return f"{value:.1f}{unit}"


def format_optional(value: Any) -> str:
    return PLACEHOLDER if value is None else str(value)


def format_optional_bytes(value: float | None) -> str:
    return PLACEHOLDER if value is None else scale_bytes(value)
