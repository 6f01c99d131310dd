"""Binchotan filters: scriptable post filters for the binchotan client."""

__version__ = "0.1.0"
