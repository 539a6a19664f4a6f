# src/bundlesmith/executor.py
"""Run build configurations through the bundling engine.

Sequential mode builds one pair at a time and hands each finished build to
the next as its cache. Watch mode runs one independent watcher per pair and
funnels their events through a single queue.
"""

import asyncio
import contextlib
from enum import Enum
from pathlib import Path

from .build_config import BuildConfig
from .engine import (
    EVENT_BUNDLE_END,
    EVENT_END,
    EVENT_FATAL,
    FAILURE_EVENTS,
    BuildHandle,
    BuildOutput,
    BundlerEngine,
    WatchEvent,
)
from .logs import get_logger
from .sizes import size_report


class StepState(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BuildError(RuntimeError):
    """A bundling step failed; carries the (entry, format) it belonged to."""

    def __init__(self, config: BuildConfig, cause: BaseException | None) -> None:
        self.config = config
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Build failed for {config.label}{detail}")


class BuildStep:
    """Tracks one (entry, format) pair through its lifecycle."""

    def __init__(self, config: BuildConfig) -> None:
        self.config = config
        self.state = StepState.IDLE
        self.last_output: BuildOutput | None = None

    def transition(self, state: StepState) -> None:
        get_logger().trace(f"[step] {self.config.label}: {self.state.value} → {state.value}")
        self.state = state


def record_name_cache(config: BuildConfig, output: BuildOutput) -> None:
    """Take the engine's updated name cache; persist it for the write-meta pair.

    Nothing is written when the engine reported no cache, so a file the
    engine saved itself is left alone.
    """
    if config.name_cache is None or output.name_cache is None:
        return
    config.name_cache.update(output.name_cache)
    if config.write_meta:
        config.name_cache.save()


async def run_step(
    config: BuildConfig,
    engine: BundlerEngine,
    previous: BuildHandle | None = None,
) -> tuple[BuildHandle, str]:
    """Bundle and write one pair.

    Returns the finished build (usable as the next step's cache) and its
    compressed-size report line.
    """
    if config.name_cache is not None:
        config.name_cache.load()

    handle = await engine.bundle(config.input_options, cache=previous)
    output = await handle.write(config.output_options)
    record_name_cache(config, output)

    return handle, size_report(output.code, output.file)


async def run_sequential(configs: list[BuildConfig], engine: BundlerEngine) -> list[str]:
    """Run every step in order; the first failure aborts the rest."""
    steps = [BuildStep(c) for c in configs]
    for step in steps:
        step.transition(StepState.SCHEDULED)

    reports: list[str] = []
    cache: BuildHandle | None = None
    for step in steps:
        step.transition(StepState.RUNNING)
        try:
            cache, report = await run_step(step.config, engine, cache)
        except (RuntimeError, OSError, ValueError) as e:
            step.transition(StepState.FAILED)
            raise BuildError(step.config, e) from e
        step.transition(StepState.COMPLETED)
        reports.append(report)
    return reports


async def _pump(
    step: BuildStep,
    engine: BundlerEngine,
    queue: "asyncio.Queue[tuple[BuildStep, WatchEvent | None]]",
    outputs: list[Path],
) -> None:
    step.transition(StepState.RUNNING)
    if step.config.name_cache is not None:
        step.config.name_cache.load()
    try:
        async for event in engine.watch(step.config.watch_options(outputs)):
            await queue.put((step, event))
    except (RuntimeError, OSError, ValueError) as e:
        await queue.put((step, WatchEvent(EVENT_FATAL, error=e)))
        return
    # None marks a watcher that stopped on its own
    await queue.put((step, None))


async def run_watch(configs: list[BuildConfig], engine: BundlerEngine) -> None:
    """Watch all pairs concurrently until a watcher fails.

    With a real engine the watchers never finish, so this only returns if
    every watcher stops by itself.
    """
    logger = get_logger()
    steps = [BuildStep(c) for c in configs]
    queue: asyncio.Queue[tuple[BuildStep, WatchEvent | None]] = asyncio.Queue()

    for step in steps:
        step.transition(StepState.SCHEDULED)
    outputs = [Path(c.output_options["file"]) for c in configs]
    tasks = [
        asyncio.create_task(_pump(step, engine, queue, outputs)) for step in steps
    ]

    running = len(tasks)
    try:
        while running:
            step, event = await queue.get()
            if event is None:
                running -= 1
                step.transition(StepState.COMPLETED)
                continue
            if event.code in FAILURE_EVENTS:
                step.transition(StepState.FAILED)
                raise BuildError(step.config, event.error)
            if event.code == EVENT_BUNDLE_END and event.output is not None:
                step.last_output = event.output
                record_name_cache(step.config, event.output)
            elif event.code == EVENT_END and step.last_output is not None:
                output = step.last_output
                logger.info("Wrote %s", size_report(output.code, output.file).strip())
    finally:
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task


def describe_output_dir(cwd: Path, main_output: Path) -> str:
    try:
        rel = main_output.parent.relative_to(cwd).as_posix()
    except ValueError:
        rel = str(main_output.parent)
    return "." if rel in {"", "."} else rel
