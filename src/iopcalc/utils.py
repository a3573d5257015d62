"""Formatting helpers shared by the renderings."""

import math
from typing import Iterable


SIZE_UNITS = ["B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def display_size(bits: int) -> str:
    """Render a size given in bits with a binary byte unit, e.g. 1536 bits -> '192 B'."""
    if bits <= 0:
        return "0B"

    size_bytes = bits / 8
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(SIZE_UNITS) - 1) if size_bytes >= 1 else 0
    p = 1024 ** i
    s = round(size_bytes / p)
    return f"{s} {SIZE_UNITS[i]}"


def format_bits(value: float) -> str:
    if math.isinf(value):
        return "inf"
    return f"{value:.1f}"


def format_float_list(values: Iterable[float]) -> str:
    """Render a list of bit values as '[1.0, 2.5]'."""
    return "[" + ", ".join(format_bits(v) for v in values) + "]"
