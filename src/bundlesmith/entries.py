# src/bundlesmith/entries.py
"""Entry point inference and expansion."""

import glob
from collections.abc import Sequence
from pathlib import Path

from .config_types import PackageManifest
from .constants import CONVENTIONAL_SOURCE_ENTRY, INDEX_FILE, SOURCE_DIR
from .logs import get_logger
from .utils import has_glob_chars


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def candidate_patterns(cwd: Path, manifest: PackageManifest) -> list[list[str]]:
    """Entry candidates to try, in priority order, when none were requested.

    Each candidate is a list of patterns because `source` may be a list.
    """
    candidates: list[list[str]] = []

    source = manifest.get("source")
    if isinstance(source, str) and source:
        candidates.append([source])
    elif isinstance(source, list) and source:
        candidates.append([s for s in source if isinstance(s, str) and s])

    if _is_dir(cwd / SOURCE_DIR):
        candidates.append([CONVENTIONAL_SOURCE_ENTRY])

    if _is_file(cwd / INDEX_FILE):
        candidates.append([INDEX_FILE])

    module = manifest.get("module")
    if isinstance(module, str) and module:
        candidates.append([module])

    return candidates


def expand_pattern(cwd: Path, pattern: str) -> list[Path]:
    """Expand one pattern against the filesystem; non-matches yield nothing."""
    logger = get_logger()
    full = Path(pattern) if Path(pattern).is_absolute() else cwd / pattern

    if has_glob_chars(pattern):
        matches = [Path(p) for p in sorted(glob.glob(str(full), recursive=True))]
        logger.trace(f"[entries] glob {pattern!r} matched {len(matches)} path(s)")
        return matches

    try:
        exists = full.exists()
    except OSError:
        exists = False
    return [full] if exists else []


def _to_entry_file(path: Path) -> Path:
    path = path.resolve()
    if _is_dir(path):
        return path / INDEX_FILE
    return path


def expand_entries(cwd: Path, patterns: Sequence[str]) -> list[Path]:
    """Expand patterns into absolute, deduplicated entry files."""
    entries: list[Path] = []
    for pattern in patterns:
        for match in expand_pattern(cwd, pattern):
            entry = _to_entry_file(match)
            if entry not in entries:
                entries.append(entry)
    return entries


def resolve_entries(
    cwd: Path,
    requested: Sequence[str],
    manifest: PackageManifest,
) -> list[Path]:
    """Resolve the ordered list of entry files for this run.

    Raises:
        FileNotFoundError: no candidate produced a single entry
    """
    logger = get_logger()
    candidates = [list(requested)] if requested else candidate_patterns(cwd, manifest)

    for patterns in candidates:
        entries = expand_entries(cwd, patterns)
        if entries:
            logger.debug("Entries: %s", ", ".join(str(e) for e in entries))
            return entries
        logger.trace(f"[entries] candidate {patterns!r} resolved to nothing")

    tried = ", ".join(repr(p) for group in candidates for p in group) or "none"
    xmsg = (
        f"No entry module found in {cwd} (tried: {tried}).\n"
        "   Pass entries explicitly or set \"source\" in package.json."
    )
    raise FileNotFoundError(xmsg)
