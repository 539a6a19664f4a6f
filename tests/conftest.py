# tests/conftest.py
"""Shared test setup for project."""

from collections.abc import Generator

import pytest

import bundlesmith.logs as mod_logs
from tests.utils import DEFAULT_TEST_LOG_LEVEL


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_logger_level() -> Generator[None, None, None]:
    """Reset the app logger before and after each test for isolation.

    The logger is a module-level singleton, so a CLI test that sets
    --log-level would otherwise leak into the next test.
    """
    logger = mod_logs.get_logger()
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)
    logger.enable_color = False
    yield
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)
    logger.enable_color = False


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell from changing defaults under test."""
    for key in (
        "BUNDLESMITH_LOG_LEVEL",
        "LOG_LEVEL",
        "BUNDLESMITH_ENGINE",
        "FORCE_COLOR",
    ):
        monkeypatch.delenv(key, raising=False)
