# src/bundlesmith/constants.py
"""Central constants used across the project."""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_ENGINE: str = "ENGINE"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_ENGINE_COMMAND: str = "bundlesmith-engine"
DEFAULT_WATCH_INTERVAL: float = 0.5  # seconds

# --- logging / terminal ---
LOG_LEVELS: list[str] = [
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",
]
RESET: str = "\033[0m"
BLUE: str = "\033[34m"
YELLOW: str = "\033[93m"
RED: str = "\033[91m"
GREEN: str = "\033[92m"

# --- manifest / project layout ---
MANIFEST_FILE: str = "package.json"
NAME_CACHE_FILE: str = "mangle.json"
DEFAULT_OUT_DIR: str = "dist"
SOURCE_DIR: str = "src"
INDEX_FILE: str = "index.js"
CONVENTIONAL_SOURCE_ENTRY: str = "src/index.js"

# --- run option defaults ---
DEFAULT_FORMATS: str = "es,cjs,umd"
DEFAULT_TARGET: str = "web"
DEFAULT_COMPRESS: bool = True
DEFAULT_STRICT: bool = False
DEFAULT_JSX_PRAGMA: str = "h"
DEFAULT_JSX_FRAGMENT: str = "Fragment"

# --- formats ---
FORMAT_CJS: str = "cjs"
FORMAT_UMD: str = "umd"
FORMAT_ES: str = "es"
FORMAT_MODERN: str = "modern"
FORMATS: tuple[str, ...] = (FORMAT_CJS, FORMAT_UMD, FORMAT_ES, FORMAT_MODERN)
FORMAT_ALIASES: dict[str, str] = {
    "commonjs": FORMAT_CJS,
    "esm": FORMAT_ES,
    "module": FORMAT_ES,
}
ES_MODULE_FORMATS: frozenset[str] = frozenset({FORMAT_ES, FORMAT_MODERN})

# --- externals ---
BUILTIN_EXTERNALS: tuple[str, ...] = ("dns", "fs", "path", "url")
NODE_MODULES_GLOB: str = "node_modules/**"
WATCH_EXCLUDE: str = NODE_MODULES_GLOB

# --- wrapper entry ---
ENTRY_ALIAS: str = "__bundlesmith_entry__"

# --- size report thresholds (gzipped bytes) ---
SIZE_SMALL: int = 5000
SIZE_LARGE: int = 40000

# --- transform toolchain ---
ENV_PRESET: str = "@babel/preset-env"
FORCED_ENV_EXCLUDES: tuple[str, ...] = (
    "transform-async-to-generator",
    "transform-regenerator",
)
NODE_TARGET_VERSION: str = "8"
TRANSFORM_CONFIG_FILES: tuple[str, ...] = (
    ".babelrc",
    ".babelrc.json",
    "babel.config.json",
)
