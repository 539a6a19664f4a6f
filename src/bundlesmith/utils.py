# src/bundlesmith/utils.py


import json
import re
from collections.abc import Mapping
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, cast

from .logs import get_logger


_IDENTIFIER_RE = re.compile(r"^[a-z_$][a-z0-9_$]*$")
# leading non-letters, non-word characters (keeping . and -), trailing junk
_UNSAFE_NAME_RE = re.compile(r"((^[^a-zA-Z]+)|[^\w.-])|([^a-zA-Z0-9]+$)")
_NAME_SEPARATORS_RE = re.compile(r"[_.\- ]+")


def has_glob_chars(s: str) -> bool:
    return any(c in s for c in "*?[]")


def plural(obj: Any) -> str:
    """Return 's' if obj represents a plural count.

    Accepts ints, floats, and any object implementing __len__().
    Returns '' for singular or zero.
    """
    count: int | float
    try:
        count = len(obj)
    except TypeError:
        count = obj if isinstance(obj, (int, float)) else 0
    return "s" if count != 1 else ""


def is_global_identifier(name: str) -> bool:
    """True for lowercase identifier-shaped names, which are usually globals."""
    return bool(_IDENTIFIER_RE.match(name))


def camel_case(value: str) -> str:
    parts = [p for p in _NAME_SEPARATORS_RE.split(value) if p]
    if not parts:
        return ""
    head, *rest = parts
    return head[:1].lower() + head[1:] + "".join(p[:1].upper() + p[1:] for p in rest)


def safe_variable_name(name: str) -> str:
    """Turn a package name into a usable global variable name.

    Example:
        "my-lib.core" → "myLibCore"
    """
    return camel_case(_UNSAFE_NAME_RE.sub("", name.lower()))


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings into a new dict.

    Nested mappings merge key by key; any other value in `override`
    replaces the one in `base`. Neither input is modified.
    """
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = deep_merge(value, {}) if isinstance(value, Mapping) else value
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(
                cast("Mapping[str, Any]", current), cast("Mapping[str, Any]", value)
            )
        elif isinstance(value, Mapping):
            merged[key] = deep_merge(cast("Mapping[str, Any]", value), {})
        else:
            merged[key] = value
    return merged


def is_excluded_raw(
    path: Path | str,
    exclude_patterns: list[str],
    root: Path,
    *,
    is_dir: bool = False,
) -> bool:
    """Match `path` (relative to `root` unless absolute) against glob patterns.

    Directories are matched with a trailing slash, so `node_modules/**`
    excludes the `node_modules` directory itself.
    """
    full_path = Path(path)
    if not full_path.is_absolute():
        full_path = root / full_path
    try:
        rel = full_path.relative_to(root).as_posix()
    except ValueError:
        # outside the root; nothing to match against
        return False
    if is_dir:
        rel += "/"
    return any(fnmatchcase(rel, pattern) for pattern in exclude_patterns)


def _strip_jsonc_comments(text: str) -> str:  # noqa: PLR0912
    """Strip comments from JSONC while preserving string contents.

    Handles // and /* */ comments without modifying content inside strings.
    """
    result: list[str] = []
    in_string = False
    in_escape = False
    i = 0
    while i < len(text):
        ch = text[i]

        if in_escape:
            result.append(ch)
            in_escape = False
            i += 1
            continue

        if ch == "\\" and in_string:
            result.append(ch)
            in_escape = True
            i += 1
            continue

        if ch == '"':
            in_string = not in_string
            result.append(ch)
            i += 1
            continue

        if in_string:
            result.append(ch)
            i += 1
            continue

        # line comment
        if ch == "/" and i + 1 < len(text) and text[i + 1] == "/":
            while i < len(text) and text[i] != "\n":
                i += 1
            if i < len(text):
                result.append("\n")
                i += 1
            continue

        # block comment
        if ch == "/" and i + 1 < len(text) and text[i + 1] == "*":
            i += 2
            while i + 1 < len(text):
                if text[i] == "*" and text[i + 1] == "/":
                    i += 2
                    break
                i += 1
            continue

        result.append(ch)
        i += 1

    return "".join(result)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load JSONC (JSON with comments and trailing commas)."""
    logger = get_logger()
    logger.trace(f"[load_jsonc] Loading from {path}")

    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = path.read_text(encoding="utf-8")
    text = _strip_jsonc_comments(text)

    # Remove trailing commas before } or ]
    text = re.sub(r",(?=\s*[}\]])", "", text)

    text = text.strip()

    if not text:
        # Empty or only comments → interpret as "no config"
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    result = cast("dict[str, Any] | list[Any]", data)
    logger.trace(f"[load_jsonc] Loaded {type(result).__name__} with {len(result)} items")
    return result
