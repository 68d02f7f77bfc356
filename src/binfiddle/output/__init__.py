"""Diff renderers and terminal output."""

from binfiddle.output.formatter import (
    FORMATS,
    FormatError,
    auto_select,
    format_diff,
    normalise_format,
    summary_line,
)

__all__ = [
    "FORMATS",
    "FormatError",
    "auto_select",
    "format_diff",
    "normalise_format",
    "summary_line",
]
