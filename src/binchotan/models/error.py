"""Structured error model for binchotan filters."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error response format.

    Every error raised by the filter loader or runner carries one of
    these so the host can report it or serialize it as-is.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., SCRIPT_ERROR)",
        examples=[
            "NOT_A_DIRECTORY",
            "IO_ERROR",
            "META_PARSE_ERROR",
            "SCRIPT_ERROR",
            "MARSHAL_ERROR",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (path, filter name, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for binchotan filters."""

    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    IO_ERROR = "IO_ERROR"
    META_PARSE_ERROR = "META_PARSE_ERROR"
    SCRIPT_ERROR = "SCRIPT_ERROR"
    MARSHAL_ERROR = "MARSHAL_ERROR"
    FILTER_NOT_FOUND = "FILTER_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
