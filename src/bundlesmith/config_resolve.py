# src/bundlesmith/config_resolve.py
"""Merge CLI arguments, config file, and defaults into BuildOptionsResolved.

Precedence: CLI > config file > built-in defaults. Manifest-derived values
(entries, output path, module name) are filled in later, once the manifest
is loaded.
"""

import argparse
import os
from pathlib import Path
from typing import Any

from .config_types import BuildOptionsResolved, RunConfig, TargetName
from .constants import (
    DEFAULT_COMPRESS,
    DEFAULT_ENGINE_COMMAND,
    DEFAULT_ENV_ENGINE,
    DEFAULT_FORMATS,
    DEFAULT_JSX_FRAGMENT,
    DEFAULT_JSX_PRAGMA,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STRICT,
    DEFAULT_TARGET,
)
from .formats import schedule_formats
from .logs import get_logger
from .meta import PROGRAM_ENV


_DEPENDENCY_MODES = {"all", "none"}


def _pick(args: argparse.Namespace | None, key: str, config: RunConfig) -> Any:
    """CLI value if given, else config file value, else None."""
    value = getattr(args, key, None) if args is not None else None
    if value is not None:
        return value
    return config.get(key)


def parse_defines(raw: list[str] | dict[str, str] | None) -> dict[str, str]:
    """Parse `KEY=VALUE` pairs (CLI) or pass a mapping (config) through."""
    if not raw:
        return {}
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    defines: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            xmsg = f"Invalid define {item!r} (expected KEY=VALUE)"
            raise ValueError(xmsg)
        defines[key.strip()] = value
    return defines


def _dependency_mode(value: Any, flag: str) -> str | None:
    if value is None:
        return None
    mode = str(value).lower()
    if mode not in _DEPENDENCY_MODES:
        xmsg = f"Invalid --{flag} value {value!r} (expected 'all' or 'none')"
        raise ValueError(xmsg)
    return mode


def _target(value: Any) -> TargetName:
    target = str(value or DEFAULT_TARGET).lower()
    if target not in {"web", "node"}:
        xmsg = f"Invalid target {value!r} (expected 'web' or 'node')"
        raise ValueError(xmsg)
    return "node" if target == "node" else "web"


def resolve_options(
    args: argparse.Namespace | None,
    config: RunConfig | None,
    cwd: Path,
) -> BuildOptionsResolved:
    logger = get_logger()
    config = config or {}

    run_cwd = cwd
    raw_cwd = getattr(args, "cwd", None) if args is not None else None
    if raw_cwd:
        run_cwd = (cwd / raw_cwd).resolve()

    entries: list[str] = list(getattr(args, "entries", None) or [])
    if not entries:
        entries = list(config.get("entries") or [])

    formats = schedule_formats(_pick(args, "format", config) or DEFAULT_FORMATS)

    compress = _pick(args, "compress", config)
    strict = _pick(args, "strict", config)
    engine = (
        _pick(args, "engine", config)
        or os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_ENGINE}")
        or DEFAULT_ENGINE_COMMAND
    )

    resolved: BuildOptionsResolved = {
        "cwd": run_cwd,
        "entries": entries,
        "formats": formats,
        "output": _pick(args, "output", config),
        "target": _target(_pick(args, "target", config)),
        "compress": DEFAULT_COMPRESS if compress is None else bool(compress),
        "watch": bool(getattr(args, "watch", False)) if args is not None else False,
        "strict": DEFAULT_STRICT if strict is None else bool(strict),
        "name": _pick(args, "name", config),
        "jsx": _pick(args, "jsx", config) or DEFAULT_JSX_PRAGMA,
        "jsx_fragment": _pick(args, "jsx_fragment", config) or DEFAULT_JSX_FRAGMENT,
        "defines": parse_defines(_pick(args, "defines", config)),
        "inline": _dependency_mode(_pick(args, "inline", config), "inline"),
        "external": _dependency_mode(_pick(args, "external", config), "external"),
        "engine": str(engine),
        "log_level": str(_pick(args, "log_level", config) or DEFAULT_LOG_LEVEL),
    }
    logger.trace(f"[resolve_options] formats={formats} target={resolved['target']}")
    return resolved
