# tests/5_core/test_command_engine.py

import asyncio
import contextlib
import json
from pathlib import Path
from typing import Any

import pytest

import bundlesmith.engine as mod_engine
from bundlesmith.transform_config import ConfigItem
from tests.utils import write_engine_script, write_manifest, write_source


def _options(root: Path, out: str = "dist/acme.js") -> tuple[Any, Any]:
    input_options = {
        "input": root / "src" / "index.js",
        "external": ["fs"],
        "plugins": [
            {"name": "babel", "options": {"presets": [ConfigItem("/nm/env", {"a": 1})]}}
        ],
        "cache": object(),
    }
    output_options = {"file": root / out, "format": "cjs"}
    return input_options, output_options


def test_encode_config_serializes_paths_and_items(tmp_path: Path) -> None:
    """The cache never crosses the process boundary."""
    # --- setup ---
    input_options, output_options = _options(tmp_path)

    # --- execute ---
    payload = json.loads(mod_engine.encode_config(input_options, output_options))

    # --- verify ---
    assert "cache" not in payload["input"]
    assert payload["input"]["input"] == str(tmp_path / "src" / "index.js")
    babel = payload["input"]["plugins"][0]["options"]
    assert babel["presets"] == [["/nm/env", {"a": 1}]]
    assert payload["output"]["file"] == str(tmp_path / "dist" / "acme.js")


def test_missing_engine_command_raises(tmp_path: Path) -> None:
    # --- setup ---
    engine = mod_engine.CommandEngine("no-such-engine-cmd-xyz --flag", tmp_path)

    # --- execute and verify ---
    with pytest.raises(RuntimeError, match="Bundling engine not found"):
        engine.executable()


def test_command_engine_bundles_and_reads_output(tmp_path: Path) -> None:
    # --- setup ---
    write_source(tmp_path, "src/index.js")
    engine = mod_engine.CommandEngine(write_engine_script(tmp_path / "tools"), tmp_path)
    input_options, output_options = _options(tmp_path)

    # --- execute ---
    async def run() -> mod_engine.BuildOutput:
        handle = await engine.bundle(input_options, cache=None)
        return await handle.write(output_options)

    output = asyncio.run(run())

    # --- verify ---
    assert output.file == tmp_path / "dist" / "acme.js"
    assert output.code.startswith("// cjs")


def test_command_engine_nonzero_exit_raises(tmp_path: Path) -> None:
    # --- setup ---
    engine = mod_engine.CommandEngine(write_engine_script(tmp_path / "tools"), tmp_path)
    input_options, output_options = _options(tmp_path, out="dist/fail.js")

    # --- execute ---
    async def run() -> None:
        handle = await engine.bundle(input_options)
        await handle.write(output_options)

    # --- verify ---
    with pytest.raises(RuntimeError, match="exited with code 3: engine refused"):
        asyncio.run(run())


def test_watched_files_skip_output_dependencies_and_dotdirs(tmp_path: Path) -> None:
    # --- setup ---
    src = write_source(tmp_path, "src/index.js")
    write_source(tmp_path, "node_modules/dep/index.js")
    write_source(tmp_path, ".git/HEAD", "ref")
    write_source(tmp_path, "dist/acme.js")
    manifest = write_source(tmp_path, "package.json", "{}")
    engine = mod_engine.CommandEngine(["unused"], tmp_path)
    input_options, output_options = _options(tmp_path)

    # --- execute ---
    files = engine._collect_watched_files(  # noqa: SLF001
        {
            "input": input_options,
            "output": output_options,
            "watch": {"exclude": "node_modules/**", "outputs": []},
        }
    )

    # --- verify ---
    assert files == sorted([manifest, src])


def test_command_engine_watch_emits_build_cycle(tmp_path: Path) -> None:
    # --- setup ---
    write_source(tmp_path, "src/index.js")
    engine = mod_engine.CommandEngine(
        write_engine_script(tmp_path / "tools"), tmp_path, interval=0.01
    )
    input_options, output_options = _options(tmp_path)
    options = {
        "input": input_options,
        "output": output_options,
        "watch": {"exclude": "node_modules/**", "outputs": []},
    }

    # --- execute ---
    async def first_cycle() -> list[mod_engine.WatchEvent]:
        events: list[mod_engine.WatchEvent] = []
        async for event in engine.watch(options):  # type: ignore[arg-type]
            events.append(event)
            if event.code in {mod_engine.EVENT_END, mod_engine.EVENT_ERROR}:
                break
        return events

    events = asyncio.run(first_cycle())

    # --- verify ---
    assert [e.code for e in events] == [
        mod_engine.EVENT_START,
        mod_engine.EVENT_BUNDLE_START,
        mod_engine.EVENT_BUNDLE_END,
        mod_engine.EVENT_END,
    ]
    assert events[2].output is not None
    assert events[2].output.file.name == "acme.js"


def test_watched_files_skip_sibling_outputs_and_maps_in_project_root(
    tmp_path: Path,
) -> None:
    """Outputs next to package.json must not count as sources."""
    # --- setup ---
    src = write_source(tmp_path, "src/index.js")
    manifest = write_source(tmp_path, "package.json", "{}")
    outputs = [tmp_path / n for n in ("acme.js", "acme.m.js", "acme.umd.js")]
    for out in outputs:
        write_source(tmp_path, out.name)
        write_source(tmp_path, f"{out.name}.map", "{}")
    engine = mod_engine.CommandEngine(["unused"], tmp_path)
    input_options, output_options = _options(tmp_path, out="acme.js")

    # --- execute ---
    files = engine._collect_watched_files(  # noqa: SLF001
        {
            "input": input_options,
            "output": output_options,
            "watch": {
                "exclude": "node_modules/**",
                "outputs": [str(p) for p in outputs],
            },
        }
    )

    # --- verify ---
    assert files == sorted([manifest, src])


def test_watch_output_in_project_root_does_not_rebuild_itself(tmp_path: Path) -> None:
    """Writing acme.js and acme.js.map next to the sources is not a change."""
    # --- setup ---
    write_manifest(tmp_path, name="acme", main="acme.js")
    write_source(tmp_path, "src/index.js")
    engine = mod_engine.CommandEngine(
        write_engine_script(tmp_path / "tools"), tmp_path, interval=0.01
    )
    input_options, output_options = _options(tmp_path, out="acme.js")
    output_options["sourcemap"] = True
    options = {
        "input": input_options,
        "output": output_options,
        "watch": {
            "exclude": "node_modules/**",
            "outputs": [str(tmp_path / "acme.js")],
        },
    }

    # --- execute ---
    async def watch_a_while() -> list[str]:
        codes: list[str] = []
        built = asyncio.Event()

        async def consume() -> None:
            async for event in engine.watch(options):  # type: ignore[arg-type]
                codes.append(event.code)
                if event.code == mod_engine.EVENT_END:
                    built.set()

        task = asyncio.create_task(consume())
        await asyncio.wait_for(built.wait(), timeout=10)
        await asyncio.sleep(0.3)  # plenty of polls at 0.01s
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        return codes

    codes = asyncio.run(watch_a_while())

    # --- verify ---
    assert (tmp_path / "acme.js.map").exists()
    assert mod_engine.EVENT_ERROR not in codes
    assert codes.count(mod_engine.EVENT_BUNDLE_START) == 1


@pytest.mark.parametrize(
    ("stdout", "expected"),
    [
        ("", None),
        ("done\n", None),
        ('{"nameCache": [1]}', None),
        ('[{"nameCache": {}}]', None),
        ('mangling\n{"nameCache": {"props": {"$_a": "a"}}}\n', {"props": {"$_a": "a"}}),
    ],
)
def test_decode_name_cache_reads_last_stdout_line(
    stdout: str, expected: dict[str, Any] | None
) -> None:
    # --- execute and verify ---
    assert mod_engine.decode_name_cache(stdout) == expected


def test_command_engine_reports_updated_name_cache(tmp_path: Path) -> None:
    # --- setup ---
    write_source(tmp_path, "src/index.js")
    engine = mod_engine.CommandEngine(write_engine_script(tmp_path / "tools"), tmp_path)
    input_options, output_options = _options(tmp_path)
    input_options["plugins"] = [
        {"name": "terser", "options": {"nameCache": {"props": {"$_old": "a"}}}},
        {"name": "name-cache", "options": {"path": tmp_path / "mangle.json"}},
    ]

    # --- execute ---
    async def run() -> mod_engine.BuildOutput:
        handle = await engine.bundle(input_options)
        return await handle.write(output_options)

    output = asyncio.run(run())

    # --- verify ---
    assert output.name_cache == {"props": {"$_old": "a", "$_cjs": "n"}}
    assert not (tmp_path / "mangle.json").exists()
