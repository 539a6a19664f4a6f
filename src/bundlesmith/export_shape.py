# src/bundlesmith/export_shape.py
"""Static export-shape check for formats without native named exports.

This is a best-effort regex heuristic, not a parser: unusual export syntax
(e.g. `export { x as default }`, re-exports, exports built in comments or
strings) may produce false negatives or positives.
"""

import re
from pathlib import Path

from .constants import ES_MODULE_FORMATS
from .logs import get_logger


DEFAULT_EXPORT_RE = re.compile(r"\bexport\s*default\s*[a-zA-Z_$]")
NAMED_EXPORT_RE = re.compile(r"\bexport\s*(let|const|var|async|function\*?)\s*[a-zA-Z_$*]")
EXPORT_LIST_RE = re.compile(r"^\s*export\s*\{", re.MULTILINE)

WRAPPER_ENTRY = Path(__file__).resolve().parent / "lib" / "__entry__.js"


def has_default_export(source: str) -> bool:
    return bool(DEFAULT_EXPORT_RE.search(source))


def has_named_exports(source: str) -> bool:
    return bool(NAMED_EXPORT_RE.search(source) or EXPORT_LIST_RE.search(source))


def detect_export_shape(entry: Path, fmt: str) -> str | None:
    """Return "default" when `entry` must be built through the wrapper entry.

    Only non-ES formats are checked. An unreadable entry is reported as
    needing no wrapper.
    """
    if fmt in ES_MODULE_FORMATS:
        return None

    logger = get_logger()
    try:
        source = entry.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.trace(f"[export_shape] could not read {entry}: {e}")
        return None

    if has_default_export(source) and has_named_exports(source):
        logger.debug(
            "%s has default and named exports; wrapping for %s", entry.name, fmt
        )
        return "default"
    return None
