"""Diff engine — span models, ignore ranges, positional comparison."""

from binfiddle.diff.engine import DiffStats, compute_diff, diff_stats
from binfiddle.diff.models import ByteSpan, IgnoreMask, IgnoreRange, SpanKind
from binfiddle.diff.ranges import IgnoreRangeParseError, parse_ignore_ranges

__all__ = [
    "ByteSpan",
    "DiffStats",
    "IgnoreMask",
    "IgnoreRange",
    "IgnoreRangeParseError",
    "SpanKind",
    "compute_diff",
    "diff_stats",
    "parse_ignore_ranges",
]
