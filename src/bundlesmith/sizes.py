# src/bundlesmith/sizes.py
"""Compressed-size reporting for generated bundles."""

import gzip
from pathlib import Path

from .constants import GREEN, RED, SIZE_LARGE, SIZE_SMALL, YELLOW
from .logs import get_logger


_UNITS = ("B", "kB", "MB", "GB")


def gzip_size(code: str) -> int:
    return len(gzip.compress(code.encode("utf-8"), compresslevel=9))


def pretty_bytes(size: float) -> str:
    """Human readable size using decimal units, e.g. `1.23 kB`."""
    if size < 1000:  # noqa: PLR2004
        return f"{int(size)} B"
    unit = 0
    while size >= 1000 and unit < len(_UNITS) - 1:  # noqa: PLR2004
        size /= 1000
        unit += 1
    rounded = float(f"{size:.3g}")
    return f"{rounded:g} {_UNITS[unit]}"


def size_color(size: int) -> str:
    if size < SIZE_SMALL:
        return GREEN
    if size > SIZE_LARGE:
        return RED
    return YELLOW


def size_report(code: str, filename: Path) -> str:
    """One right-aligned report line: `   1.2 kB: foo.js`."""
    logger = get_logger()
    size = gzip_size(code)
    pretty = pretty_bytes(size)
    padding = " " * max(0, 10 - len(pretty))
    return f"{padding}{logger.colorize(pretty, size_color(size))}: {filename.name}"
