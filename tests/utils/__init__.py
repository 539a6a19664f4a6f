# tests/utils/__init__.py

from .constants import DEFAULT_TEST_LOG_LEVEL, PROJ_ROOT
from .fake_engine import FakeBuild, FakeEngine, plugin_options
from .project import (
    make_args,
    make_options,
    write_engine_script,
    write_manifest,
    write_source,
)


__all__ = [  # noqa: RUF022
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
    "PROJ_ROOT",
    # fake_engine
    "FakeBuild",
    "FakeEngine",
    "plugin_options",
    # project
    "make_args",
    "make_options",
    "write_engine_script",
    "write_manifest",
    "write_source",
]
