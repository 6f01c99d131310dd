"""Scripting engine interface and the Lua implementation.

Filters only see the engine through ScriptEngine/ScriptContext, so the
runner never touches Lua objects directly. Values crossing the boundary
are plain JSON-compatible Python values in both directions.
"""

import math
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from lupa import LuaError, LuaRuntime, LuaSyntaxError, lua_type

from binchotan.core.errors import MarshalError, ScriptError

# Lua tables nest; cyclic tables would otherwise recurse forever.
MAX_DEPTH = 64


class ScriptContext(ABC):
    """A single isolated script environment.

    A context is used for exactly one evaluation and then discarded.
    """

    @abstractmethod
    def bind(self, name: str, value: Any) -> None:
        """Bind a JSON-compatible value to a global name.

        Raises:
            MarshalError: If the value cannot be represented in the script
        """

    @abstractmethod
    def eval(self, source: str) -> Any:
        """Evaluate a script body and return its result.

        Returns:
            The result as a JSON-compatible value, None for nil/null

        Raises:
            ScriptError: If the script fails to compile or run
            MarshalError: If the result cannot be converted back
        """

    def close(self) -> None:
        """Release the script state."""

    def __enter__(self) -> "ScriptContext":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ScriptEngine(ABC):
    """Factory for fresh script contexts."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine identifier."""

    @abstractmethod
    def create_context(self) -> ScriptContext:
        """Create a new context that shares no state with any other."""


class LuaContext(ScriptContext):
    """Script context backed by its own LuaRuntime."""

    def __init__(self) -> None:
        self._lua: LuaRuntime | None = LuaRuntime(
            register_eval=False,
            register_builtins=False,
        )
        g = self._lua.globals()
        g["python"] = None

        # Captured before any script runs so a filter rebinding these
        # globals cannot change how its result is read back.
        self._setmetatable = g["setmetatable"]
        self._getmetatable = g["getmetatable"]
        self._rawequal = g["rawequal"]
        self._array_mt = self._lua.eval("{__name = 'array'}")
        self._null = self._lua.eval(
            "setmetatable({}, {__name = 'null', __tostring = function() return 'null' end})"
        )
        g["null"] = self._null

    @property
    def lua(self) -> LuaRuntime:
        if self._lua is None:
            raise RuntimeError("script context already closed")
        return self._lua

    def bind(self, name: str, value: Any) -> None:
        self.lua.globals()[name] = self._to_lua(value, 0)

    def eval(self, source: str) -> Any:
        lua = self.lua
        try:
            try:
                chunk = lua.compile("return " + source)
            except LuaSyntaxError:
                chunk = lua.compile(source)
            result = chunk()
        except LuaError as e:
            raise ScriptError(str(e).strip() or "script raised a non-string error value") from e
        except UnicodeDecodeError as e:
            raise MarshalError(f"script returned a non UTF-8 string: {e}") from e

        if isinstance(result, tuple):
            result = result[0] if result else None
        return self._from_lua(result, 0)

    def close(self) -> None:
        self._lua = None

    def _to_lua(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise MarshalError(f"value nested deeper than {MAX_DEPTH} levels")

        if value is None:
            return self._null
        if isinstance(value, (bool, int, float, str)):
            return value

        if isinstance(value, dict):
            table = self.lua.table()
            for key, item in value.items():
                if not isinstance(key, str):
                    raise MarshalError(f"object key {key!r} is not a string")
                table[key] = self._to_lua(item, depth + 1)
            return table

        if isinstance(value, (list, tuple)):
            table = self.lua.table()
            for index, item in enumerate(value, start=1):
                table[index] = self._to_lua(item, depth + 1)
            self._setmetatable(table, self._array_mt)
            return table

        raise MarshalError(f"cannot pass {type(value).__name__} to a script")

    def _from_lua(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise MarshalError(f"table nested deeper than {MAX_DEPTH} levels")

        if isinstance(value, float) and not math.isfinite(value):
            raise MarshalError(f"script returned a non-finite number: {value}")
        if value is None or isinstance(value, (bool, int, float, str)):
            return value

        kind = lua_type(value)
        if kind != "table":
            raise MarshalError(f"cannot convert Lua {kind} to a host value")

        if self._rawequal(value, self._null):
            return None

        try:
            items = list(value.items())
        except UnicodeDecodeError as e:
            raise MarshalError(f"table holds a non UTF-8 string: {e}") from e
        is_array = self._rawequal(self._getmetatable(value), self._array_mt)

        if not is_array and items and all(_is_index(k) for k, _ in items):
            keys = sorted(k for k, _ in items)
            is_array = keys == list(range(1, len(keys) + 1))

        if is_array:
            by_index = dict(items)
            result = []
            for index in range(1, len(items) + 1):
                if index not in by_index:
                    raise MarshalError("array table has holes")
                result.append(self._from_lua(by_index[index], depth + 1))
            return result

        obj = {}
        for key, item in items:
            if not isinstance(key, str):
                raise MarshalError(f"table key {key!r} is not a string")
            obj[key] = self._from_lua(item, depth + 1)
        return obj


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


class LuaEngine(ScriptEngine):
    """Runs filters as Lua scripts, one LuaRuntime per context."""

    @property
    def name(self) -> str:
        return "lua"

    def create_context(self) -> LuaContext:
        return LuaContext()
