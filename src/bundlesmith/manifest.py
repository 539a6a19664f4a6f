# src/bundlesmith/manifest.py
"""Package manifest loading.

A missing or unreadable manifest is never fatal: the run continues with an
empty manifest and a name derived from the project directory.
"""

import json
from pathlib import Path
from typing import cast

from .config_types import PackageManifest
from .constants import MANIFEST_FILE
from .logs import get_logger


def read_manifest(cwd: Path) -> PackageManifest:
    """Parse `<cwd>/package.json`.

    Raises:
        FileNotFoundError: the manifest does not exist
        ValueError: the manifest is not a JSON object
    """
    path = cwd / MANIFEST_FILE
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = f"Invalid JSON in {path}: {e.msg} (line {e.lineno}, column {e.colno})"
        raise ValueError(xmsg) from e
    if not isinstance(data, dict):
        xmsg = f"Invalid manifest root type in {path}: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return cast("PackageManifest", data)


def load_manifest(cwd: Path) -> PackageManifest:
    """Load the manifest, degrading to defaults with warnings."""
    logger = get_logger()
    manifest: PackageManifest
    try:
        manifest = read_manifest(cwd)
    except (OSError, ValueError) as e:
        logger.warning("no %s found.", MANIFEST_FILE)
        if not isinstance(e, FileNotFoundError):
            logger.warning("  %s", e)
        manifest = {}

    if not manifest.get("name"):
        manifest["name"] = cwd.name
        logger.warning(
            'missing %s "name" field. Assuming "%s".', MANIFEST_FILE, manifest["name"]
        )

    logger.trace(f"[manifest] loaded keys: {sorted(manifest)}")
    return manifest


def dependency_names(manifest: PackageManifest) -> list[str]:
    return list((manifest.get("dependencies") or {}).keys())


def peer_dependency_names(manifest: PackageManifest) -> list[str]:
    return list((manifest.get("peerDependencies") or {}).keys())
