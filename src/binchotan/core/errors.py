"""Structured error handling for binchotan filters."""

from pathlib import Path
from typing import Any

from binchotan.models.error import ErrorCode, StructuredError


class BinchotanError(Exception):
    """Base exception for binchotan errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.error.code

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class LoadError(BinchotanError):
    """Raised while loading a filter repository."""


class RunError(BinchotanError):
    """Raised while running a filter against a post."""


class FilterPathNotDirError(LoadError):
    """A filter root or package path is not a directory."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(
            code=ErrorCode.NOT_A_DIRECTORY,
            message=f"Filter path {self.path} is not a directory",
            remediation="Point --filters-dir at a directory containing one subdirectory per filter",
            retryable=False,
            context={"path": str(self.path)},
        )


class FilterIOError(LoadError):
    """A filter config or entrypoint could not be read."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(
            code=ErrorCode.IO_ERROR,
            message=message,
            remediation="Check that the file exists, is readable and is UTF-8 text",
            retryable=True,
            context={"path": str(self.path)} if self.path else None,
        )


class FilterMetaParseError(LoadError):
    """binchotan.toml does not parse into a filter manifest."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(
            code=ErrorCode.META_PARSE_ERROR,
            message=message,
            remediation="binchotan.toml needs string keys name, description, author and entrypoint",
            retryable=False,
            context={"path": str(self.path)} if self.path else None,
        )


class FilterNotFoundError(BinchotanError):
    """No loaded filter has the requested name."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            code=ErrorCode.FILTER_NOT_FOUND,
            message=f"Filter '{name}' not found",
            remediation=f"Loaded filters: {', '.join(available) or '(none)'}",
            retryable=False,
            context={"name": name, "available": available},
        )


class ScriptError(RunError):
    """The filter script failed to compile or raised at runtime."""

    def __init__(self, message: str, filter_name: str | None = None):
        super().__init__(
            code=ErrorCode.SCRIPT_ERROR,
            message=message,
            remediation="Fix the Lua error reported by the filter script",
            retryable=False,
            context={"filter": filter_name} if filter_name else None,
        )


class MarshalError(RunError):
    """A value could not cross the host/script boundary."""

    def __init__(self, message: str, filter_name: str | None = None):
        super().__init__(
            code=ErrorCode.MARSHAL_ERROR,
            message=message,
            remediation="Return nil to drop the post or a table shaped like the post to keep it",
            retryable=False,
            context={"filter": filter_name} if filter_name else None,
        )


def create_error(
    code: str,
    message: str,
    remediation: str,
    retryable: bool = False,
    context: dict[str, Any] | None = None,
) -> StructuredError:
    """Create a structured error.

    Args:
        code: Error code
        message: Human-readable message
        remediation: Suggested fix
        retryable: Whether retry may succeed
        context: Additional context

    Returns:
        StructuredError instance
    """
    return StructuredError(
        code=code,
        message=message,
        remediation=remediation,
        retryable=retryable,
        context=context,
    )
