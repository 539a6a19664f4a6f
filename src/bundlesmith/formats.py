# src/bundlesmith/formats.py
"""Output format normalization and scheduling."""

from collections.abc import Sequence

from .constants import FORMAT_ALIASES, FORMAT_CJS, FORMATS


def parse_formats(value: str | Sequence[str]) -> list[str]:
    """Split, trim, alias, validate and deduplicate requested formats."""
    raw = value.split(",") if isinstance(value, str) else list(value)
    formats: list[str] = []
    for item in raw:
        fmt = item.strip().lower()
        if not fmt:
            continue
        fmt = FORMAT_ALIASES.get(fmt, fmt)
        if fmt not in FORMATS:
            valid = ", ".join(FORMATS)
            xmsg = f"Unknown output format {item.strip()!r} (expected one of: {valid})"
            raise ValueError(xmsg)
        if fmt not in formats:
            formats.append(fmt)
    if not formats:
        xmsg = "No output formats requested"
        raise ValueError(xmsg)
    return formats


def schedule_formats(value: str | Sequence[str]) -> list[str]:
    """Return formats in build order: cjs first, the rest lexical.

    The first format of the run is the one that writes metadata
    (extracted stylesheet, name cache), so its position must not depend
    on the order the formats were requested in.
    """
    return sorted(parse_formats(value), key=lambda fmt: (fmt != FORMAT_CJS, fmt))
