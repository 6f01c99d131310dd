"""Filter system for rewriting or dropping posts with Lua scripts.

Filters live in a repository directory, one package per subdirectory:

    filters/
        dropper/
            binchotan.toml
            main.lua

Each run evaluates the script in a fresh Lua state with the post bound
to the global ``post``.
"""

from binchotan.filters.engine import LuaEngine, ScriptContext, ScriptEngine
from binchotan.filters.loader import (
    DEFAULT_FILTER_DIR,
    Filter,
    FilterLoader,
    discover_filters,
    load_filter,
    load_filters,
)
from binchotan.filters.manifest import META_FILENAME, FilterMeta
from binchotan.filters.runner import (
    Drop,
    FilterOutcome,
    FilterRunner,
    FilterRunResult,
    Keep,
    run_filter,
)

__all__ = [
    "DEFAULT_FILTER_DIR",
    "META_FILENAME",
    "Drop",
    "Filter",
    "FilterLoader",
    "FilterMeta",
    "FilterOutcome",
    "FilterRunResult",
    "FilterRunner",
    "Keep",
    "LuaEngine",
    "ScriptContext",
    "ScriptEngine",
    "discover_filters",
    "load_filter",
    "load_filters",
    "run_filter",
]
