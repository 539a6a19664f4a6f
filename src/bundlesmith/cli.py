# src/bundlesmith/cli.py

import argparse
import asyncio
import platform
import subprocess
import sys
from contextlib import suppress
from difflib import get_close_matches
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import apathetic_logging as mod_alogs

from .build import run_build
from .config_loader import load_and_validate_config
from .config_resolve import resolve_options
from .constants import DEFAULT_FORMATS, LOG_LEVELS
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_PACKAGE, PROGRAM_SCRIPT, Metadata


MODE_WORDS = {"build", "watch"}


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --fromat ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT)

    parser.add_argument(
        "entries",
        nargs="*",
        metavar="ENTRY",
        help=(
            "Entry modules or glob patterns. May start with 'build' or 'watch'. "
            "Defaults to package.json \"source\", src/index.js, or index.js."
        ),
    )

    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        default=False,
        help="Rebuild on any change.",
    )
    parser.add_argument(
        "-f",
        "--format",
        help=f"Output formats, comma separated (default: {DEFAULT_FORMATS}).",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Main output file or directory (default: package.json \"main\" or dist).",
    )
    parser.add_argument(
        "--target",
        choices=["web", "node"],
        help="Environment to build for (default: web).",
    )
    parser.add_argument("--name", help="Global name for the UMD build.")
    parser.add_argument("--jsx", help="JSX pragma (default: h).")
    parser.add_argument(
        "--jsx-fragment", dest="jsx_fragment", help="JSX fragment pragma."
    )
    parser.add_argument(
        "--define",
        dest="defines",
        action="append",
        metavar="KEY=VALUE",
        help="Replace an expression at build time. Repeatable.",
    )
    parser.add_argument(
        "--inline",
        choices=["all", "none"],
        help="Bundle ('all') or externalize ('none') dependencies.",
    )
    parser.add_argument(
        "--external",
        choices=["all", "none"],
        help="'all' leaves every dependency external.",
    )
    parser.add_argument(
        "--strict",
        action="store_const",
        const=True,
        default=None,
        help="Emit 'use strict' in outputs.",
    )
    parser.add_argument("--cwd", help="Project directory (default: current).")
    parser.add_argument("-c", "--config", help="Path to a bundlesmith config file.")
    parser.add_argument(
        "--engine",
        help="Bundling engine command (default: bundlesmith-engine).",
    )

    compress = parser.add_mutually_exclusive_group()
    compress.add_argument(
        "--compress",
        dest="compress",
        action="store_const",
        const=True,
        help="Minify outputs (default).",
    )
    compress.add_argument(
        "--no-compress",
        dest="compress",
        action="store_const",
        const=False,
        help="Skip minification.",
    )
    compress.set_defaults(compress=None)

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return parser


def _normalize_mode(args: argparse.Namespace) -> None:
    """Treat a leading `build`/`watch` positional as the run mode."""
    entries: list[str] = list(getattr(args, "entries", None) or [])
    if entries and entries[0] in MODE_WORDS:
        mode = entries.pop(0)
        if mode == "watch":
            args.watch = True
    args.entries = entries


def _initialize_logger(args: argparse.Namespace) -> None:
    """Initialize logger with CLI args, env vars, and defaults."""
    logger = get_logger()
    log_level = logger.determineLogLevel(args=args)
    logger.setLevel(log_level)
    use_color = getattr(args, "use_color", None)
    logger.enable_color = (
        use_color if use_color is not None else logger.determineColorEnabled()
    )
    logger.trace("[BOOT] log-level initialized: %s", logger.levelName)

    logger.debug(
        "Runtime: Python %s (%s)\n    %s",
        platform.python_version(),
        platform.python_implementation(),
        sys.version.replace("\n", " "),
    )


def get_metadata() -> Metadata:
    """Return installed version and, from a checkout, the git commit."""
    pkg_version = "unknown"
    commit = "unknown"
    with suppress(PackageNotFoundError):
        pkg_version = version(PROGRAM_PACKAGE)

    with suppress(OSError, subprocess.CalledProcessError):
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=Path(__file__).resolve().parent,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or commit
    return Metadata(pkg_version, commit)


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)
        _normalize_mode(args)

        _initialize_logger(args)

        if getattr(args, "version", None):
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        cwd = Path.cwd().resolve()
        project_dir = (cwd / args.cwd).resolve() if args.cwd else cwd
        loaded = load_and_validate_config(args, project_dir)
        config = None
        if loaded is not None:
            config_path, config = loaded
            logger.info("🔧 Using config: %s", config_path.name)
            if getattr(args, "log_level", None) is None and config.get("log_level"):
                logger.setLevel(
                    logger.determineLogLevel(root_log_level=config["log_level"])
                )

        options = resolve_options(args, config, cwd)
        summary = asyncio.run(run_build(options))
        if summary:
            logger.info(summary)

    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")
        return 0

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        try:
            logger.errorIfNotDebug(str(e))
        except Exception:  # noqa: BLE001
            mod_alogs.safeLog(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.criticalIfNotDebug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            mod_alogs.safeLog(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    else:
        return 0
