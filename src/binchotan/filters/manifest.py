"""Filter manifest definitions.

Defines the binchotan.toml format describing a filter package.
"""

import tomllib
from pathlib import Path, PurePath

from pydantic import BaseModel, Field, ValidationError, field_validator

from binchotan.core.errors import FilterIOError, FilterMetaParseError

META_FILENAME = "binchotan.toml"


class FilterMeta(BaseModel):
    """Filter metadata read from binchotan.toml.

    Example:
        name = "dropper"
        description = "drops every post"
        author = "t"
        entrypoint = "main.lua"
    """

    name: str = Field(..., description="Filter name")
    description: str = Field(..., description="What the filter does")
    author: str = Field(..., description="Filter author")
    entrypoint: str = Field(
        ..., description="Lua script relative to the package directory"
    )

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("entrypoint")
    @classmethod
    def validate_relative(cls, v: str) -> str:
        """Keep the entrypoint inside the package directory."""
        path = PurePath(v)
        if path.anchor:
            raise ValueError("entrypoint must be a relative path")
        if ".." in path.parts:
            raise ValueError("entrypoint must not leave the package directory")
        return v


def read_meta(package_dir: Path) -> FilterMeta:
    """Read and validate the manifest of a filter package.

    Args:
        package_dir: Filter package directory

    Returns:
        Parsed FilterMeta

    Raises:
        FilterIOError: If binchotan.toml cannot be read
        FilterMetaParseError: If it is not valid TOML or lacks required keys
    """
    meta_path = package_dir / META_FILENAME

    try:
        raw = meta_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FilterIOError(f"Cannot read {meta_path}: {e}", path=meta_path) from e

    try:
        return FilterMeta(**tomllib.loads(raw))
    except tomllib.TOMLDecodeError as e:
        raise FilterMetaParseError(f"Invalid TOML in {meta_path}: {e}", path=meta_path) from e
    except ValidationError as e:
        raise FilterMetaParseError(
            f"Invalid filter manifest {meta_path}: {e}", path=meta_path
        ) from e
