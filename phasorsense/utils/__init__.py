"""Configuration, raw-file loading and small formatting helpers."""

from .formatting import format_rounded

__all__ = ["format_rounded"]
