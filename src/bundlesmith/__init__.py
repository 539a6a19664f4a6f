# src/bundlesmith/__init__.py

"""Bundlesmith: zero-config build configurations for JavaScript packages.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()                  → CLI entrypoint
    - run_build()             → Plan and run every (entry, format) build
    - resolve_options()       → Merge CLI args with config file and defaults
    - create_build_configs()  → Engine configurations without running them
"""

from .build import plan_build, prepare_options, run_build
from .build_config import BuildConfig, create_build_configs, create_config
from .cli import main
from .config_loader import find_config, load_config
from .config_resolve import resolve_options
from .config_types import BuildOptionsResolved, PackageManifest, RunConfig
from .engine import (
    BuildHandle,
    BuildOutput,
    BundlerEngine,
    CommandEngine,
    WatchEvent,
)
from .entries import resolve_entries
from .executor import BuildError, StepState, run_sequential, run_step, run_watch
from .export_shape import detect_export_shape
from .formats import schedule_formats
from .logs import get_logger
from .manifest import load_manifest
from .meta import PROGRAM_DISPLAY, PROGRAM_PACKAGE, PROGRAM_SCRIPT, Metadata
from .name_cache import NameCache
from .output_paths import derive_output_file, resolve_main_output
from .transform_config import (
    ConfigItem,
    create_transform_config,
    merge_config_items,
    override_env_preset,
)


__all__ = [  # noqa: RUF022
    # build
    "plan_build",
    "prepare_options",
    "run_build",
    # build_config
    "BuildConfig",
    "create_build_configs",
    "create_config",
    # cli
    "main",
    # config
    "find_config",
    "load_config",
    "resolve_options",
    "BuildOptionsResolved",
    "PackageManifest",
    "RunConfig",
    # engine
    "BuildHandle",
    "BuildOutput",
    "BundlerEngine",
    "CommandEngine",
    "WatchEvent",
    # entries / formats / paths / shape
    "resolve_entries",
    "schedule_formats",
    "derive_output_file",
    "resolve_main_output",
    "detect_export_shape",
    # executor
    "BuildError",
    "StepState",
    "run_sequential",
    "run_step",
    "run_watch",
    # logs
    "get_logger",
    # manifest
    "load_manifest",
    # meta
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    # name cache
    "NameCache",
    # transform config
    "ConfigItem",
    "create_transform_config",
    "merge_config_items",
    "override_env_preset",
]
