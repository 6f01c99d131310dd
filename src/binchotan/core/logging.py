"""Logging and progress utilities for binchotan filters.

All diagnostics go to stderr so stdout stays clean for the posts
that filters let through.
"""

import json
import sys
import time
from datetime import UTC, datetime
from typing import Any, Literal

_verbose = False
_quiet = False
_log_format: Literal["text", "json"] = "text"


def set_verbose(verbose: bool) -> None:
    """Set verbose mode."""
    global _verbose
    _verbose = verbose


def configure_logging(
    log_format: Literal["text", "json"] = "text",
    quiet: bool = False,
) -> None:
    """Configure logging settings.

    Args:
        log_format: Output format for log messages
        quiet: Suppress progress output
    """
    global _log_format, _quiet
    _log_format = log_format
    _quiet = quiet


def log(
    message: str,
    level: Literal["debug", "info", "warning", "error"] = "info",
    **context: Any,
) -> None:
    """Log a message to stderr.

    Args:
        message: Log message
        level: Log level
        **context: Additional context to include
    """
    if _quiet and level in ("debug", "info"):
        return

    if level == "debug" and not _verbose:
        return

    if _log_format == "json":
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "message": message,
            **context,
        }
        print(json.dumps(log_entry, default=str), file=sys.stderr)
    else:
        prefix = f"[{level.upper()}]" if level != "info" else ""
        if prefix:
            print(f"{prefix} {message}", file=sys.stderr)
        else:
            print(message, file=sys.stderr)


def debug(message: str, **context: Any) -> None:
    """Log a debug message."""
    log(message, level="debug", **context)


def info(message: str, **context: Any) -> None:
    """Log an info message."""
    log(message, level="info", **context)


def error(message: str, **context: Any) -> None:
    """Log an error message."""
    log(message, level="error", **context)


class ProgressReporter:
    """Reports filtering progress to stderr."""

    def __init__(self, description: str = "Filtering", unit: str = "posts"):
        self.description = description
        self.unit = unit
        self.current = 0
        self.kept = 0
        self.dropped = 0
        self.failed = 0
        self.start_time = time.perf_counter()

    def update(self, kept: int = 0, dropped: int = 0, failed: int = 0) -> None:
        """Count processed posts by outcome."""
        self.kept += kept
        self.dropped += dropped
        self.failed += failed
        self.current += kept + dropped + failed

    def finish(self) -> None:
        """Print the summary line."""
        if _quiet:
            return

        elapsed = time.perf_counter() - self.start_time
        rate = self.current / elapsed if elapsed > 0 else 0

        if _log_format == "json":
            complete = {
                "description": self.description,
                "total": self.current,
                "kept": self.kept,
                "dropped": self.dropped,
                "failed": self.failed,
                "duration_seconds": round(elapsed, 2),
                "rate": round(rate, 1),
                "unit": self.unit,
            }
            print(json.dumps({"complete": complete}), file=sys.stderr)
        else:
            print(
                f"{self.description}: {self.current} {self.unit} "
                f"({self.kept} kept, {self.dropped} dropped, {self.failed} failed) "
                f"in {_format_duration(elapsed)}",
                file=sys.stderr,
            )


def _format_duration(seconds: float) -> str:
    """Format duration in human-readable form."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
