"""Output formatting for the binchotan-filters CLI.

Implements JSON, JSONL, and human-readable output modes.
stdout contains only machine-readable results.
stderr carries progress, logs, and diagnostics.
"""

import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

OutputFormat = Literal["json", "jsonl", "human"]


class JSONEncoder(json.JSONEncoder):
    """JSON encoder for pydantic models and paths."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def output_json(data: Any, file: Any = None) -> None:
    """Output data as JSON to stdout.

    Args:
        data: Data to output (dict, list, or Pydantic model)
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    json.dump(_plain(data), file, cls=JSONEncoder, ensure_ascii=False)
    file.write("\n")
    file.flush()


def output_jsonl(records: Iterable[Any], file: Any = None) -> None:
    """Output records as JSONL (one JSON object per line) to stdout.

    Args:
        records: Records (dicts or Pydantic models)
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    for record in records:
        json.dump(_plain(record), file, cls=JSONEncoder, ensure_ascii=False)
        file.write("\n")
    file.flush()


def output_human_table(
    records: list[dict[str, Any]],
    columns: list[str],
    title: str | None = None,
    file: Any = None,
    max_width: int = 50,
) -> None:
    """Output records as a human-readable table.

    Args:
        records: List of record dictionaries
        columns: Columns to display, dotted for nested keys
        title: Optional title for the table
        file: Output file (defaults to stdout)
        max_width: Maximum column width
    """
    if file is None:
        file = sys.stdout

    if not records:
        file.write("No records.\n")
        return

    if title:
        file.write(f"\n{title}\n")
        file.write("=" * len(title) + "\n\n")

    widths = {col: len(col) for col in columns}
    for record in records[:100]:
        for col in columns:
            value = _get_nested_value(record, col)
            widths[col] = min(max_width, max(widths[col], len(str(value))))

    header = " | ".join(col.ljust(widths[col])[:widths[col]] for col in columns)
    file.write(header + "\n")
    file.write("-" * len(header) + "\n")

    for record in records:
        row = []
        for col in columns:
            value = _get_nested_value(record, col)
            value_str = str(value) if value is not None else ""
            if len(value_str) > widths[col]:
                value_str = value_str[: widths[col] - 3] + "..."
            row.append(value_str.ljust(widths[col]))
        file.write(" | ".join(row) + "\n")

    file.write(f"\nTotal: {len(records)}\n")
    file.flush()


def _get_nested_value(record: dict[str, Any], key: str) -> Any:
    """Get a nested value using dot notation (e.g., 'user.screen_name')."""
    value: Any = record
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return None
    return value


class OutputFormatter:
    """Encapsulates output formatting for commands."""

    def __init__(self, format: OutputFormat = "json"):
        """Initialize formatter with specified format.

        Args:
            format: Output format (json, jsonl, human)
        """
        self.format = format

    def records(
        self,
        records: list[Any],
        columns: list[str],
        title: str | None = None,
    ) -> None:
        """Output a list of records in the configured format.

        Args:
            records: Records to output
            columns: Columns shown in human format
            title: Table title for human format
        """
        if self.format == "human":
            output_human_table([_plain(r) for r in records], columns, title=title)
        elif self.format == "jsonl":
            output_jsonl(records)
        else:
            output_json([_plain(r) for r in records])

    def error(self, error: Any) -> None:
        """Output an error to stdout for programmatic handling."""
        output_json(error)
