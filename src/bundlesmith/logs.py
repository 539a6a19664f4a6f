# src/bundlesmith/logs.py

import logging
from typing import cast

from apathetic_logging import (
    Logger,
    registerDefaultLogLevel,
    registerLogger,
    registerLogLevelEnvVars,
)

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


class BundleLogger(Logger):
    """App-specific logger class."""


# --- Logger initialization ---------------------------------------------------

# Must run before any logger is created so getLogger() builds a BundleLogger.
logging.setLoggerClass(BundleLogger)

# TRACE and SILENT levels
BundleLogger.extendLoggingModule()

# BUNDLESMITH_LOG_LEVEL wins over LOG_LEVEL
registerLogLevelEnvVars(
    [f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}", DEFAULT_ENV_LOG_LEVEL]
)
registerDefaultLogLevel(DEFAULT_LOG_LEVEL)
registerLogger(PROGRAM_PACKAGE)

_APP_LOGGER = cast("BundleLogger", logging.getLogger(PROGRAM_PACKAGE))


# --- Convenience utils -------------------------------------------------------


def get_logger() -> BundleLogger:
    """Return the configured app logger."""
    return _APP_LOGGER
