# src/bundlesmith/engine.py
"""Boundary to the external bundling engine.

The executor only talks to a `BundlerEngine`. `CommandEngine` is the default
implementation: it hands each (input, output) configuration as JSON to an
external command and reads the written bundle back.
"""

import asyncio
import json
import os
import shlex
import shutil
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .config_types import InputOptions, OutputOptions, WatchOptions
from .constants import DEFAULT_WATCH_INTERVAL
from .logs import get_logger
from .transform_config import ConfigItem
from .utils import is_excluded_raw


# --- event codes ---
EVENT_START = "START"
EVENT_BUNDLE_START = "BUNDLE_START"
EVENT_BUNDLE_END = "BUNDLE_END"
EVENT_END = "END"
EVENT_ERROR = "ERROR"
EVENT_FATAL = "FATAL"
FAILURE_EVENTS = frozenset({EVENT_ERROR, EVENT_FATAL})


@dataclass
class BuildOutput:
    """Generated code and where it was written.

    `name_cache` is the minifier's updated name cache, or None when the
    engine did not report one.
    """

    code: str
    file: Path
    name_cache: dict[str, Any] | None = None


@dataclass
class WatchEvent:
    code: str
    error: BaseException | None = None
    output: BuildOutput | None = None


class BuildHandle(Protocol):
    """A bundled module graph; reusable as the next build's cache."""

    async def write(self, output_options: OutputOptions) -> BuildOutput: ...


class BundlerEngine(Protocol):
    async def bundle(
        self,
        input_options: InputOptions,
        *,
        cache: BuildHandle | None = None,
    ) -> BuildHandle: ...

    def watch(self, options: WatchOptions) -> AsyncIterator[WatchEvent]: ...


# --------------------------------------------------------------------------- #
# command engine
# --------------------------------------------------------------------------- #


def _encode(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, ConfigItem):
        return value.to_json()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    xmsg = f"Cannot serialize {type(value).__name__} for the bundling engine"
    raise TypeError(xmsg)


def encode_config(input_options: InputOptions, output_options: OutputOptions) -> str:
    payload = {
        "input": {k: v for k, v in input_options.items() if k != "cache"},
        "output": output_options,
    }
    return json.dumps(payload, default=_encode)


def decode_name_cache(stdout: str) -> dict[str, Any] | None:
    """Pick `nameCache` out of the engine's reply.

    The reply is the last stdout line, as a JSON object. Anything printed
    before it, or a reply that isn't JSON, is ignored.
    """
    lines = stdout.strip().splitlines()
    if not lines:
        return None
    try:
        reply = json.loads(lines[-1])
    except ValueError:
        return None
    if not isinstance(reply, dict):
        return None
    name_cache = reply.get("nameCache")
    return name_cache if isinstance(name_cache, dict) else None


class CommandBuild:
    """Deferred build: the command bundles and writes in one call."""

    def __init__(self, engine: "CommandEngine", input_options: InputOptions) -> None:
        self.engine = engine
        self.input_options = input_options

    async def write(self, output_options: OutputOptions) -> BuildOutput:
        stdout = await self.engine.run_command(
            encode_config(self.input_options, output_options)
        )
        file = Path(output_options["file"])
        code = file.read_text(encoding="utf-8")
        return BuildOutput(code=code, file=file, name_cache=decode_name_cache(stdout))


class CommandEngine:
    """Run an external bundler command per build.

    Each process starts cold, so the cache handed to `bundle()` is accepted
    and ignored.
    """

    def __init__(
        self,
        command: str | Sequence[str],
        cwd: Path,
        *,
        interval: float = DEFAULT_WATCH_INTERVAL,
    ) -> None:
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.cwd = cwd
        self.interval = interval

    def executable(self) -> list[str]:
        if not self.command:
            xmsg = "No bundling engine command configured"
            raise RuntimeError(xmsg)
        found = shutil.which(self.command[0])
        if found is None:
            xmsg = (
                f"Bundling engine not found: {self.command[0]!r}.\n"
                "   Install it or point --engine at a compatible command."
            )
            raise RuntimeError(xmsg)
        return [found, *self.command[1:]]

    async def run_command(self, payload: str) -> str:
        logger = get_logger()
        cmd = self.executable()
        logger.trace(f"[engine] running {' '.join(cmd)}")
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=self.cwd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate(payload.encode("utf-8"))
        if proc.returncode != 0:
            detail = (stderr or stdout).decode("utf-8", "replace").strip()
            xmsg = f"Bundling engine exited with code {proc.returncode}: {detail}"
            raise RuntimeError(xmsg)
        return stdout.decode("utf-8", "replace")

    async def bundle(
        self,
        input_options: InputOptions,
        *,
        cache: BuildHandle | None = None,  # noqa: ARG002
    ) -> BuildHandle:
        return CommandBuild(self, input_options)

    def _collect_watched_files(self, options: WatchOptions) -> list[Path]:
        """All files under cwd minus excluded patterns and anything the run writes.

        Every output of the run and its `.map` sibling is skipped, and so is
        every output directory other than cwd itself.
        """
        settings = options["watch"]
        excludes = [settings["exclude"]]
        root = self.cwd.resolve()
        written: set[Path] = set()
        for out in [options["output"]["file"], *settings["outputs"]]:
            out_file = (self.cwd / out).resolve()
            written.add(out_file)
            written.add(out_file.with_name(out_file.name + ".map"))
        out_dirs = {p.parent for p in written} - {root}

        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.cwd):
            current = Path(dirpath)
            kept: list[str] = []
            for name in dirnames:
                sub = current / name
                if name.startswith(".") or is_excluded_raw(
                    sub, excludes, self.cwd, is_dir=True
                ):
                    continue
                if sub.resolve() in out_dirs:
                    continue
                kept.append(name)
            dirnames[:] = kept
            files.extend(
                current / name
                for name in filenames
                if (current / name).resolve() not in written
            )
        return sorted(files)

    def _scan(self, options: WatchOptions) -> dict[Path, float]:
        mtimes: dict[Path, float] = {}
        for f in self._collect_watched_files(options):
            try:
                mtimes[f] = f.stat().st_mtime
            except OSError:
                continue
        return mtimes

    async def watch(self, options: WatchOptions) -> AsyncIterator[WatchEvent]:
        """Poll source mtimes and rebuild on change, forever."""
        logger = get_logger()
        mtimes: dict[Path, float] = {}
        first = True
        while True:
            changed: list[Path] = []
            scanned = await asyncio.to_thread(self._scan, options)
            for f, new_m in scanned.items():
                old_m = mtimes.get(f)
                if old_m is None or new_m > old_m:
                    changed.append(f)
                    mtimes[f] = new_m

            if first or changed:
                if not first:
                    logger.debug("Detected %d modified file(s)", len(changed))
                first = False
                yield WatchEvent(EVENT_START)
                yield WatchEvent(EVENT_BUNDLE_START)
                try:
                    handle = await self.bundle(options["input"])
                    output = await handle.write(options["output"])
                except (RuntimeError, OSError) as e:
                    yield WatchEvent(EVENT_ERROR, error=e)
                else:
                    yield WatchEvent(EVENT_BUNDLE_END, output=output)
                    yield WatchEvent(EVENT_END)

            await asyncio.sleep(self.interval)
