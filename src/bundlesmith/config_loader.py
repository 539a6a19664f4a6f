# src/bundlesmith/config_loader.py
"""Project config file discovery and loading."""

import argparse
from pathlib import Path
from typing import Any, cast

from .config_types import RunConfig
from .logs import get_logger
from .meta import PROGRAM_CONFIG
from .utils import load_jsonc, plural


KNOWN_CONFIG_KEYS: frozenset[str] = frozenset(RunConfig.__annotations__)


def find_config(args: argparse.Namespace, cwd: Path) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. .{PROGRAM_CONFIG}.jsonc, then .{PROGRAM_CONFIG}.json in cwd

    Returns the first matching path, or None if no config was found.
    """
    logger = get_logger()

    if getattr(args, "config", None):
        config = Path(args.config).expanduser()
        if not config.is_absolute():
            config = cwd / config
        config = config.resolve()
        logger.trace(f"[find_config] Checking explicit path: {config}")
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    found = [
        candidate
        for name in (f".{PROGRAM_CONFIG}.jsonc", f".{PROGRAM_CONFIG}.json")
        if (candidate := cwd / name).is_file()
    ]
    if not found:
        logger.trace(f"[find_config] No config file in {cwd}")
        return None
    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        logger.warning(
            "Multiple config files detected (%s); using %s.", names, found[0].name
        )
    return found[0]


def load_config(config_path: Path) -> RunConfig:
    """Load and shallowly validate a config file."""
    logger = get_logger()
    data = load_jsonc(config_path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        xmsg = f"Config file {config_path.name} must contain an object"
        raise ValueError(xmsg)  # noqa: TRY004

    raw = cast("dict[str, Any]", data)
    unknown = sorted(set(raw) - KNOWN_CONFIG_KEYS)
    if unknown:
        logger.warning(
            "Ignoring unknown key%s in %s: %s",
            plural(unknown),
            config_path.name,
            ", ".join(unknown),
        )
    return cast("RunConfig", {k: v for k, v in raw.items() if k in KNOWN_CONFIG_KEYS})


def load_and_validate_config(
    args: argparse.Namespace, cwd: Path
) -> tuple[Path, RunConfig] | None:
    config_path = find_config(args, cwd)
    if config_path is None:
        return None
    return config_path, load_config(config_path)
