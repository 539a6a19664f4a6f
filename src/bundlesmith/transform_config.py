# src/bundlesmith/transform_config.py
"""Transform toolchain configuration: tool defaults merged with the project's.

Plugins and presets are identified by their resolved module path. Merging
two lists keeps one item per identity, in first-seen order, with the options
deep-merged so the later list wins on conflicting keys.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from .config_types import ConfigItemKind, PackageManifest, TransformCustomOptions
from .constants import (
    DEFAULT_JSX_FRAGMENT,
    DEFAULT_JSX_PRAGMA,
    ENV_PRESET,
    FORCED_ENV_EXCLUDES,
    TRANSFORM_CONFIG_FILES,
)
from .logs import get_logger
from .utils import deep_merge, load_jsonc


@dataclass(frozen=True)
class ConfigItem:
    resolved: str  # identity used for merging
    options: dict[str, Any] = field(default_factory=dict)
    request: str = ""  # name as normalized from the config
    kind: ConfigItemKind = "plugin"

    def to_json(self) -> list[Any]:
        return [self.resolved, self.options]


# --------------------------------------------------------------------------- #
# name normalization and resolution
# --------------------------------------------------------------------------- #

_ORG_RE = {
    kind: re.compile(rf"^(@babel/)(?!{kind}-|[^/]+/)") for kind in ("plugin", "preset")
}
_PREFIX_RE = {
    kind: re.compile(rf"^(?!@|module:|[^/]+/|babel-{kind}-)")
    for kind in ("plugin", "preset")
}
_OTHER_ORG_RE = {
    kind: re.compile(rf"^(@(?!babel/)[^/]+/)(?![^/]*babel-{kind}(?:-|/|$)|[^/]+/)")
    for kind in ("plugin", "preset")
}
_OTHER_ORG_DEFAULT_RE = re.compile(r"^(@(?!babel$)[^/]+)$")
_MODULE_PREFIX_RE = re.compile(r"^module:")


def normalize_request(name: str, kind: ConfigItemKind) -> str:
    """Expand shorthand names the way the transform toolchain does.

    Examples:
        ("env", "preset")          → "babel-preset-env"
        ("@babel/env", "preset")   → "@babel/preset-env"
        ("@acme/x", "plugin")      → "@acme/babel-plugin-x"
    """
    if Path(name).is_absolute():
        return name
    name = _PREFIX_RE[kind].sub(f"babel-{kind}-", name, count=1)
    name = _ORG_RE[kind].sub(rf"\g<1>{kind}-", name, count=1)
    name = _OTHER_ORG_RE[kind].sub(rf"\g<1>babel-{kind}-", name, count=1)
    name = _OTHER_ORG_DEFAULT_RE.sub(rf"\g<1>/babel-{kind}", name, count=1)
    return _MODULE_PREFIX_RE.sub("", name, count=1)


def resolve_module(request: str, cwd: Path) -> str:
    """Resolve a module request to an absolute path where possible.

    Relative requests resolve against `cwd`; bare names are looked up in
    `node_modules` directories from `cwd` upwards. An unresolvable request
    keeps its own name as its identity.
    """
    if request.startswith((".", "/")) or Path(request).is_absolute():
        return str((cwd / request).resolve())
    for directory in (cwd, *cwd.parents):
        candidate = directory / "node_modules" / request
        if candidate.exists():
            return str(candidate.resolve())
    return request


def create_config_item(
    name: str,
    options: Mapping[str, Any] | None,
    kind: ConfigItemKind,
    cwd: Path,
) -> ConfigItem:
    request = normalize_request(name, kind)
    return ConfigItem(
        resolved=resolve_module(request, cwd),
        options=dict(options or {}),
        request=request,
        kind=kind,
    )


def parse_config_entry(entry: Any, kind: ConfigItemKind, cwd: Path) -> ConfigItem:
    """Turn `"name"` or `["name", {options}]` into a ConfigItem."""
    if isinstance(entry, ConfigItem):
        return entry
    if isinstance(entry, str):
        return create_config_item(entry, None, kind, cwd)
    if isinstance(entry, list) and entry and isinstance(entry[0], str):
        items = cast("list[Any]", entry)
        options = items[1] if len(items) > 1 and isinstance(items[1], dict) else None
        return create_config_item(items[0], options, kind, cwd)
    xmsg = f"Invalid {kind} entry in transform config: {entry!r}"
    raise ValueError(xmsg)


# --------------------------------------------------------------------------- #
# defaults
# --------------------------------------------------------------------------- #


def default_plugin_specs(custom: TransformCustomOptions) -> list[tuple[str, dict[str, Any]]]:
    specs: list[tuple[str, dict[str, Any]]] = [
        (
            "@babel/plugin-transform-react-jsx",
            {
                "pragma": custom.get("jsx") or DEFAULT_JSX_PRAGMA,
                "pragmaFrag": custom.get("jsx_fragment") or DEFAULT_JSX_FRAGMENT,
            },
        ),
    ]
    if custom.get("defines"):
        specs.append(
            (
                "babel-plugin-transform-replace-expressions",
                {"replace": custom["defines"]},
            )
        )
    specs.extend(
        [
            (
                "babel-plugin-transform-async-to-promises",
                {"inlineHelpers": True, "externalHelpers": True},
            ),
            ("@babel/plugin-proposal-class-properties", {"loose": True}),
            ("@babel/plugin-transform-regenerator", {"async": False}),
        ]
    )
    return specs


def default_plugins(custom: TransformCustomOptions, cwd: Path) -> list[ConfigItem]:
    return [
        create_config_item(name, options, "plugin", cwd)
        for name, options in default_plugin_specs(custom)
    ]


# --------------------------------------------------------------------------- #
# merging
# --------------------------------------------------------------------------- #


def merge_config_items(*lists: Iterable[ConfigItem]) -> list[ConfigItem]:
    merged: dict[str, ConfigItem] = {}
    for items in lists:
        for item in items:
            existing = merged.get(item.resolved)
            if existing is None:
                merged[item.resolved] = item
                continue
            merged[item.resolved] = ConfigItem(
                resolved=existing.resolved,
                options=deep_merge(existing.options, item.options),
                request=existing.request,
                kind=existing.kind,
            )
    return list(merged.values())


def _forced_excludes(user_excludes: Any) -> list[str]:
    excludes = list(FORCED_ENV_EXCLUDES)
    if isinstance(user_excludes, str):
        user_excludes = [user_excludes]
    for name in user_excludes or []:
        if name not in excludes:
            excludes.append(name)
    return excludes


def override_env_preset(item: ConfigItem, targets: Mapping[str, Any] | None) -> ConfigItem:
    """Pin the env preset to settings this tool depends on.

    The project's options are layered over `loose`/`targets`, then
    `modules`, `loose` and `exclude` are forced.
    """
    base: dict[str, Any] = {"loose": True}
    if targets is not None:
        base["targets"] = dict(targets)
    options = deep_merge(base, item.options)
    options["modules"] = False
    options["loose"] = True
    options["exclude"] = _forced_excludes(item.options.get("exclude"))
    return ConfigItem(
        resolved=item.resolved, options=options, request=item.request, kind="preset"
    )


def is_env_preset(item: ConfigItem) -> bool:
    return item.request == ENV_PRESET


# --------------------------------------------------------------------------- #
# filesystem config
# --------------------------------------------------------------------------- #


def find_filesystem_config(cwd: Path) -> Path | None:
    for name in TRANSFORM_CONFIG_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_filesystem_config(
    cwd: Path, manifest: PackageManifest
) -> dict[str, Any] | None:
    """Return the project's own transform config, if it has one."""
    logger = get_logger()
    path = find_filesystem_config(cwd)
    if path is not None:
        data = load_jsonc(path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            xmsg = f"Transform config {path} must contain an object"
            raise ValueError(xmsg)  # noqa: TRY004
        logger.debug("Using transform config: %s", path.name)
        return data

    babel = manifest.get("babel")
    if isinstance(babel, dict):
        logger.debug('Using transform config from package.json "babel"')
        return dict(babel)
    return None


def create_transform_config(
    cwd: Path,
    custom: TransformCustomOptions,
    filesystem_config: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Build the final presets/plugins handed to the transform toolchain."""
    targets = custom.get("targets")
    defaults = default_plugins(custom, cwd)

    if filesystem_config is not None:
        options = dict(filesystem_config)
        presets = [
            parse_config_entry(entry, "preset", cwd)
            for entry in options.get("presets") or []
        ]
        presets = [
            override_env_preset(p, targets) if is_env_preset(p) else p for p in presets
        ]
        user_plugins = [
            parse_config_entry(entry, "plugin", cwd)
            for entry in options.get("plugins") or []
        ]
    else:
        options = {}
        presets = [
            override_env_preset(
                create_config_item(ENV_PRESET, None, "preset", cwd), targets
            )
        ]
        user_plugins = []

    options["presets"] = presets
    options["plugins"] = merge_config_items(defaults, user_plugins)
    return options
