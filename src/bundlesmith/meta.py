# src/bundlesmith/meta.py
"""Program identity used for logging, env vars, and config discovery."""

from typing import NamedTuple


PROGRAM_PACKAGE = "bundlesmith"
PROGRAM_SCRIPT = "bundlesmith"
PROGRAM_DISPLAY = "Bundlesmith"
PROGRAM_CONFIG = "bundlesmith"
PROGRAM_ENV = "BUNDLESMITH"


class Metadata(NamedTuple):
    version: str
    commit: str
