"""Pydantic models for binchotan filters."""

from binchotan.models.error import ErrorCode, StructuredError
from binchotan.models.tweet import Tweet, TwitterUser

__all__ = [
    "ErrorCode",
    "StructuredError",
    "Tweet",
    "TwitterUser",
]
