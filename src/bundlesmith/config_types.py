# src/bundlesmith/config_types.py


from pathlib import Path
from typing import Any, Literal, TypedDict

from typing_extensions import NotRequired


FormatName = Literal["cjs", "umd", "es", "modern"]
TargetName = Literal["web", "node"]
ConfigItemKind = Literal["plugin", "preset"]


class MangleConfig(TypedDict, total=False):
    regex: str
    reserved: list[str]


PackageManifest = TypedDict(
    "PackageManifest",
    {
        "name": str,
        "main": str,
        "module": str,
        "source": str | list[str],
        "jsnext:main": str,
        "cjs:main": str,
        "umd:main": str,
        "esmodule": str,
        "syntax": dict[str, str],
        "amdName": str,
        "dependencies": dict[str, str],
        "peerDependencies": dict[str, str],
        "mangle": MangleConfig,
        "babel": dict[str, Any],
    },
    total=False,
)


class RunConfig(TypedDict, total=False):
    """Options as written in a `.bundlesmith.json(c)` file."""

    entries: list[str]
    format: str | list[str]
    output: str
    target: TargetName
    compress: bool
    strict: bool
    name: str
    jsx: str
    jsx_fragment: str
    defines: dict[str, str]
    inline: str
    external: str
    engine: str
    log_level: str


class BuildOptionsResolved(TypedDict):
    cwd: Path
    entries: list[str]  # requested patterns, may be empty
    formats: list[str]  # scheduled order
    output: str | None  # explicit output, before main-path derivation
    target: TargetName
    compress: bool
    watch: bool
    strict: bool
    name: str | None
    jsx: str
    jsx_fragment: str
    defines: dict[str, str]
    inline: str | None
    external: str | None
    engine: str
    log_level: str

    # filled in while the run is prepared
    manifest: NotRequired[PackageManifest]
    main_output: NotRequired[Path]
    resolved_entries: NotRequired[list[Path]]
    multiple_entries: NotRequired[bool]


class TransformCustomOptions(TypedDict, total=False):
    """Caller-level knobs handed to the transform toolchain."""

    jsx: str
    jsx_fragment: str
    defines: dict[str, str]
    targets: dict[str, Any] | None


class InputOptions(TypedDict):
    input: Path
    external: list[str]
    plugins: list["PluginSpec"]
    cache: NotRequired[Any]


class OutputOptions(TypedDict):
    file: Path
    format: str
    name: str
    exports: str | None
    paths: dict[str, str]
    globals: dict[str, str]
    strict: bool
    legacy: bool
    freeze: bool
    sourcemap: bool
    treeshake: dict[str, bool]


class PluginSpec(TypedDict):
    """One step of the engine's plugin pipeline."""

    name: str
    options: dict[str, Any]


class WatchSettings(TypedDict):
    exclude: str
    # every bundle written by the run, across all watchers
    outputs: list[str]


class WatchOptions(TypedDict):
    input: InputOptions
    output: OutputOptions
    watch: WatchSettings
