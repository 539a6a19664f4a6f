# src/bundlesmith/name_cache.py
"""Persisted minifier name cache (`mangle.json`).

Keeps mangled property names stable across runs. Reading never fails:
a missing or malformed file is an empty cache. The engine reports its
updated cache with each written bundle; only the write-meta pair saves it.
"""

import json
from pathlib import Path
from typing import Any

from .constants import NAME_CACHE_FILE
from .logs import get_logger


class NameCache:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.data: dict[str, Any] = {}
        self.loaded = False

    @classmethod
    def for_project(cls, cwd: Path) -> "NameCache":
        return cls(cwd / NAME_CACHE_FILE)

    def load(self) -> dict[str, Any]:
        """Read the cache file once; later calls return the in-memory copy."""
        if self.loaded:
            return self.data
        self.loaded = True
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return self.data
        if isinstance(data, dict):
            self.data.clear()
            self.data.update(data)
        return self.data

    def save(self) -> None:
        logger = get_logger()
        self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
        logger.debug("Wrote name cache: %s", self.path.name)

    def update(self, data: dict[str, Any]) -> None:
        """Replace the cache with the engine's updated copy, in place."""
        self.data.clear()
        self.data.update(data)
