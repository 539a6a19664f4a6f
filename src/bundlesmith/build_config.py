# src/bundlesmith/build_config.py
"""Assemble one engine configuration per (entry, format) pair."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config_types import (
    BuildOptionsResolved,
    InputOptions,
    OutputOptions,
    PackageManifest,
    PluginSpec,
    TransformCustomOptions,
    WatchOptions,
)
from .constants import (
    BUILTIN_EXTERNALS,
    ENTRY_ALIAS,
    FORMAT_CJS,
    FORMAT_ES,
    FORMAT_MODERN,
    NODE_MODULES_GLOB,
    NODE_TARGET_VERSION,
    WATCH_EXCLUDE,
)
from .export_shape import WRAPPER_ENTRY, detect_export_shape
from .logs import get_logger
from .manifest import dependency_names, peer_dependency_names
from .name_cache import NameCache
from .output_paths import derive_output_file, entry_aliases
from .transform_config import create_transform_config
from .utils import is_global_identifier, safe_variable_name


@dataclass
class BuildConfig:
    entry: Path
    format: str
    write_meta: bool
    input_options: InputOptions
    output_options: OutputOptions
    name_cache: NameCache | None = None

    @property
    def label(self) -> str:
        return f"{self.entry.name} ({self.format})"

    def watch_options(self, outputs: list[Path] | None = None) -> WatchOptions:
        """Options for one watcher; `outputs` lists every file the run writes."""
        written = {str(self.output_options["file"])}
        written.update(str(p) for p in outputs or [])
        return {
            "input": self.input_options,
            "output": self.output_options,
            "watch": {"exclude": WATCH_EXCLUDE, "outputs": sorted(written)},
        }


# --------------------------------------------------------------------------- #
# pieces
# --------------------------------------------------------------------------- #


def uses_dependency_resolution(options: BuildOptionsResolved) -> bool:
    if options["inline"] == "all":
        return True
    return not (options["external"] == "all" or options["inline"] == "none")


def compute_externals(
    options: BuildOptionsResolved,
    manifest: PackageManifest,
    entry: Path,
    entries: list[Path],
) -> list[str]:
    external: list[str] = [
        *BUILTIN_EXTERNALS,
        *peer_dependency_names(manifest),
        *(str(e) for e in entries if e != entry),
    ]
    if len(entries) > 1:
        external.append(".")
    if not uses_dependency_resolution(options):
        external.extend(dependency_names(manifest))
    return external


def compute_globals(external: list[str]) -> dict[str, str]:
    """Identifier-shaped externals are looked up as globals of the same name."""
    return {name: name for name in external if is_global_identifier(name)}


def module_name(options: BuildOptionsResolved, manifest: PackageManifest) -> str:
    return (
        options["name"]
        or manifest.get("amdName")
        or safe_variable_name(manifest.get("name", ""))
    )


def transform_targets(target: str, fmt: str) -> dict[str, Any] | None:
    if fmt == FORMAT_MODERN:
        return {"esmodules": True}
    if target == "node":
        return {"node": NODE_TARGET_VERSION}
    return None


def _plugin(name: str, **options: Any) -> PluginSpec:
    return {"name": name, "options": options}


def build_plugins(  # noqa: PLR0913
    options: BuildOptionsResolved,
    manifest: PackageManifest,
    entry: Path,
    fmt: str,
    *,
    write_meta: bool,
    transform_config: dict[str, Any],
    name_cache: NameCache | None,
) -> list[PluginSpec]:
    """Ordered plugin pipeline for the engine."""
    mangle = manifest.get("mangle")
    plugins: list[PluginSpec] = [
        _plugin("alias", entries={ENTRY_ALIAS: entry}),
        # only the first pair writes CSS, avoiding duplicate stylesheet files
        _plugin("postcss", plugins=["autoprefixer"], inject=False, extract=write_meta),
        _plugin("flow", all=True),
        _plugin(
            "async-to-promises",
            exclude=NODE_MODULES_GLOB,
            inlineHelpers=True,
            externalHelpers=True,
        ),
        _plugin(
            "babel",
            exclude=NODE_MODULES_GLOB,
            presets=transform_config["presets"],
            plugins=transform_config["plugins"],
            config={
                k: v
                for k, v in transform_config.items()
                if k not in {"presets", "plugins"}
            },
        ),
    ]

    if uses_dependency_resolution(options):
        plugins.append(_plugin("commonjs", include=NODE_MODULES_GLOB))
        plugins.append(
            _plugin(
                "node-resolve",
                module=True,
                jsnext=True,
                browser=options["target"] != "node",
            )
        )

    if options["compress"]:
        plugins.append(
            _plugin(
                "terser",
                output={"comments": False},
                mangle={
                    "toplevel": fmt in {FORMAT_CJS, FORMAT_ES, FORMAT_MODERN},
                    "properties": (
                        {
                            "regex": mangle.get("regex"),
                            "reserved": list(mangle.get("reserved") or []),
                        }
                        if mangle
                        else False
                    ),
                },
                nameCache=name_cache.data if name_cache is not None else {},
                module=fmt in {FORMAT_ES, FORMAT_MODERN},
            )
        )

    if name_cache is not None:
        plugins.append(
            _plugin("name-cache", path=name_cache.path, persist=write_meta)
        )

    plugins.append(_plugin("shebang"))
    return plugins


# --------------------------------------------------------------------------- #
# factory
# --------------------------------------------------------------------------- #


def create_config(  # noqa: PLR0913
    options: BuildOptionsResolved,
    entry: Path,
    fmt: str,
    *,
    write_meta: bool,
    filesystem_transform_config: dict[str, Any] | None = None,
    name_cache: NameCache | None = None,
) -> BuildConfig:
    """Build the engine configuration for a single (entry, format) pair."""
    manifest = options.get("manifest", {})
    entries = options.get("resolved_entries", [entry])
    multiple_entries = options.get("multiple_entries", len(entries) > 1)
    main = options["main_output"]

    external = compute_externals(options, manifest, entry, entries)
    exports = detect_export_shape(entry, fmt)

    custom: TransformCustomOptions = {
        "jsx": options["jsx"],
        "jsx_fragment": options["jsx_fragment"],
        "defines": options["defines"],
        "targets": transform_targets(options["target"], fmt),
    }
    transform_config = create_transform_config(
        options["cwd"], custom, filesystem_transform_config
    )

    if manifest.get("mangle") and name_cache is None:
        name_cache = NameCache.for_project(options["cwd"])

    input_options: InputOptions = {
        "input": WRAPPER_ENTRY if exports else entry,
        "external": external,
        "plugins": build_plugins(
            options,
            manifest,
            entry,
            fmt,
            write_meta=write_meta,
            transform_config=transform_config,
            name_cache=name_cache,
        ),
    }
    output_options: OutputOptions = {
        "file": derive_output_file(
            main, entry, fmt, manifest, multiple_entries=multiple_entries
        ),
        "format": FORMAT_ES if fmt == FORMAT_MODERN else fmt,
        "name": module_name(options, manifest),
        "exports": exports,
        "paths": entry_aliases(main, multiple_entries=multiple_entries),
        "globals": compute_globals(external),
        "strict": options["strict"] is True,
        "legacy": True,
        "freeze": False,
        "sourcemap": True,
        "treeshake": {"propertyReadSideEffects": False},
    }
    return BuildConfig(
        entry=entry,
        format=fmt,
        write_meta=write_meta,
        input_options=input_options,
        output_options=output_options,
        name_cache=name_cache,
    )


def check_unique_outputs(configs: list[BuildConfig]) -> None:
    """Raise if two pairs would write the same file."""
    seen: dict[Path, BuildConfig] = {}
    collisions: list[str] = []
    for config in configs:
        file = config.output_options["file"]
        other = seen.get(file)
        if other is not None:
            collisions.append(f"{other.label} and {config.label} both write {file}")
        else:
            seen[file] = config
    if collisions:
        xmsg = "Output path collision:\n   " + "\n   ".join(collisions)
        raise ValueError(xmsg)


def create_build_configs(
    options: BuildOptionsResolved,
    filesystem_transform_config: dict[str, Any] | None = None,
) -> list[BuildConfig]:
    """One config per (entry, format), entries outer, formats in schedule order."""
    logger = get_logger()
    entries = options["resolved_entries"]
    manifest = options.get("manifest", {})
    name_cache = NameCache.for_project(options["cwd"]) if manifest.get("mangle") else None

    configs: list[BuildConfig] = []
    for i, entry in enumerate(entries):
        for j, fmt in enumerate(options["formats"]):
            configs.append(
                create_config(
                    options,
                    entry,
                    fmt,
                    write_meta=i == 0 and j == 0,
                    filesystem_transform_config=filesystem_transform_config,
                    name_cache=name_cache,
                )
            )
            logger.trace(
                f"[config] {entry.name} {fmt} → {configs[-1].output_options['file']}"
            )

    check_unique_outputs(configs)
    return configs
