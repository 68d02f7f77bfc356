"""Parsing of ``--ignore-offsets`` range lists.

Accepted forms, comma separated::

    10          single byte (10..11)
    10..20      bytes 10-19
    ..20        bytes 0-19
    0x100..     0x100 to the end of the compared region
    ..          everything

Numbers are decimal, ``0x``-prefixed hex, or a leading-zero digit string
which is read as hex (``0100`` == 256).
"""

from __future__ import annotations

import re
from typing import List

from binfiddle.diff.models import IgnoreMask, IgnoreRange

_HEX_DIGITS_RE = re.compile(r"^[0-9a-fA-F]+$")


class IgnoreRangeParseError(ValueError):
    """Raised when an ignore-range specification is malformed."""


def parse_number(text: str) -> int:
    """Parse a decimal or hexadecimal offset."""
    s = text.strip()
    if not s:
        raise IgnoreRangeParseError("empty number")

    if s[:2] in ("0x", "0X"):
        digits = s[2:]
        if not _HEX_DIGITS_RE.match(digits):
            raise IgnoreRangeParseError(f"invalid hexadecimal number '{s}'")
        return int(digits, 16)
    if s.startswith("0") and len(s) > 1 and _HEX_DIGITS_RE.match(s[1:]):
        return int(s[1:], 16)
    if not (s.isascii() and s.isdigit()):
        raise IgnoreRangeParseError(f"invalid decimal number '{s}'")
    return int(s)


def parse_range(text: str) -> IgnoreRange:
    """Parse a single range specification."""
    spec = text.strip()
    if ".." not in spec:
        index = parse_number(spec)
        return IgnoreRange(index, index + 1)

    parts = spec.split("..")
    if len(parts) != 2:
        raise IgnoreRangeParseError(
            f"invalid range '{spec}': expected 'start..end', '..end', 'start..', or '..'"
        )
    start = parse_number(parts[0]) if parts[0].strip() else 0
    end = parse_number(parts[1]) if parts[1].strip() else None
    if end is not None and start >= end:
        raise IgnoreRangeParseError(
            f"invalid range '{spec}': start {start} must be less than end {end}"
        )
    return IgnoreRange(start, end)


def parse_ignore_ranges(spec: str) -> IgnoreMask:
    """Parse a comma-separated list of ranges into an IgnoreMask."""
    if not spec or not spec.strip():
        return IgnoreMask()

    ranges: List[IgnoreRange] = []
    for part in spec.split(","):
        if not part.strip():
            continue
        ranges.append(parse_range(part))
    return IgnoreMask(tuple(ranges))
