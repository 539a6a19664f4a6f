# src/bundlesmith/build.py
"""Top-level run: manifest → entries → configs → executor."""

from .build_config import BuildConfig, create_build_configs
from .config_types import BuildOptionsResolved
from .constants import BLUE
from .engine import BundlerEngine, CommandEngine
from .entries import resolve_entries
from .executor import describe_output_dir, run_sequential, run_watch
from .logs import get_logger
from .manifest import load_manifest
from .output_paths import resolve_main_output
from .transform_config import load_filesystem_config
from .utils import plural


def prepare_options(options: BuildOptionsResolved) -> BuildOptionsResolved:
    """Fill in the manifest-derived fields of `options` (in place).

    Raises:
        FileNotFoundError: no entry could be resolved
    """
    cwd = options["cwd"]
    manifest = load_manifest(cwd)
    entries = resolve_entries(cwd, options["entries"], manifest)

    options["manifest"] = manifest
    options["resolved_entries"] = entries
    options["multiple_entries"] = len(entries) > 1
    options["main_output"] = resolve_main_output(cwd, options["output"], manifest)
    return options


def plan_build(options: BuildOptionsResolved) -> list[BuildConfig]:
    """Resolve everything and return the configs without running them."""
    logger = get_logger()
    prepare_options(options)
    filesystem_config = load_filesystem_config(options["cwd"], options["manifest"])
    configs = create_build_configs(options, filesystem_config)
    logger.debug(
        "Planned %d build%s: %d entr%s x %s",
        len(configs),
        plural(configs),
        len(options["resolved_entries"]),
        "y" if len(options["resolved_entries"]) == 1 else "ies",
        ",".join(options["formats"]),
    )
    return configs


async def run_build(
    options: BuildOptionsResolved,
    engine: BundlerEngine | None = None,
) -> str:
    """Build every (entry, format) pair.

    Returns the summary of written files. In watch mode this only returns
    if every watcher stops on its own.
    """
    logger = get_logger()
    configs = plan_build(options)
    cwd = options["cwd"]
    if engine is None:
        engine = CommandEngine(options["engine"], cwd)
    out_dir = describe_output_dir(cwd, options["main_output"])

    if options["watch"]:
        logger.info(
            logger.colorize(f"Watching source, compiling to {out_dir}:", BLUE)
        )
        await run_watch(configs, engine)
        return ""

    reports = await run_sequential(configs, engine)
    header = logger.colorize(f"Build output to {out_dir}:", BLUE)
    return header + "\n   " + "\n   ".join(reports)
