# src/bundlesmith/output_paths.py
"""Destination paths for each (entry, format) pair."""

import re
from pathlib import Path

from .config_types import PackageManifest
from .constants import (
    DEFAULT_OUT_DIR,
    FORMAT_CJS,
    FORMAT_ES,
    FORMAT_MODERN,
    FORMAT_UMD,
)


_HAS_EXTENSION_RE = re.compile(r"\.[a-z]+$")
_FORMAT_SUFFIX_RE = re.compile(r"(\.(umd|cjs|es|m|modern))?\.js$")
_INDEX_ENTRY_RE = re.compile(r"(\\|/)index(\.(umd|cjs|es|m|modern))?\.js$")
_SOURCE_DIR_RE = re.compile(r"src/")

# everything from the first dot of a file name
_FIRST_SEGMENT_RE = re.compile(r"^[^.]+")


def resolve_main_output(
    cwd: Path,
    output: str | None,
    manifest: PackageManifest,
) -> Path:
    """Return the canonical main bundle path for the run."""
    main = (cwd / (output or manifest.get("main") or DEFAULT_OUT_DIR)).resolve()
    if not _HAS_EXTENSION_RE.search(main.name) or main.is_dir():
        main = main / f"{manifest['name']}.js"
    return main


def _replace_name(template: str, base: Path) -> Path:
    """Combine `base` with the suffix of `template`'s file name.

    Example:
        ("dist/foo.module.js", /abs/dist/acme) → /abs/dist/acme.module.js
    """
    suffix = _FIRST_SEGMENT_RE.sub("", Path(template).name, count=1)
    return base.parent / f"{base.name}{suffix}"


def output_base(main: Path, entry: Path, *, multiple_entries: bool) -> Path:
    """Main path without its format suffix, per entry for multi-entry runs."""
    base = main
    if multiple_entries:
        name = main if _INDEX_ENTRY_RE.search(entry.as_posix()) else entry
        base = main.parent / name.name
    return base.parent / _FORMAT_SUFFIX_RE.sub("", base.name)


def format_template(fmt: str, manifest: PackageManifest) -> str:
    """Pick the manifest field (or fallback) whose suffix names this format."""
    if fmt == FORMAT_ES:
        module = manifest.get("module")
        if module and not _SOURCE_DIR_RE.search(module):
            return module
        return manifest.get("jsnext:main") or "x.m.js"
    if fmt == FORMAT_UMD:
        return manifest.get("umd:main") or "x.umd.js"
    if fmt == FORMAT_MODERN:
        syntax = manifest.get("syntax") or {}
        return syntax.get("esmodules") or manifest.get("esmodule") or "x.modern.js"
    if fmt == FORMAT_CJS:
        return manifest.get("cjs:main") or "x.js"
    xmsg = f"Unknown output format {fmt!r}"
    raise ValueError(xmsg)


def derive_output_file(
    main: Path,
    entry: Path,
    fmt: str,
    manifest: PackageManifest,
    *,
    multiple_entries: bool,
) -> Path:
    base = output_base(main, entry, multiple_entries=multiple_entries)
    return _replace_name(format_template(fmt, manifest), base)


def entry_aliases(main: Path, *, multiple_entries: bool) -> dict[str, str]:
    """Import aliases so an index entry imports its built siblings.

    Only multi-entry runs need them; the `.` key is also an external.
    """
    if not multiple_entries:
        return {}
    return {".": f"./{main.name}"}
