"""Data models for binary diffing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple


class SpanKind(str, Enum):
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class ByteSpan:
    """A maximal contiguous region where *old* and *new* differ.

    ``offset`` is always a position in the old buffer. An ADDED span at the
    tail sits at ``len(old)``; a REMOVED span at the tail sits at ``len(new)``.
    """

    offset: int
    kind: SpanKind
    old_bytes: bytes = b""
    new_bytes: bytes = b""

    @classmethod
    def between(cls, offset: int, old_bytes: bytes, new_bytes: bytes) -> "ByteSpan":
        """Build a span, deriving its kind from which sides are present."""
        if not old_bytes and not new_bytes:
            raise ValueError(f"empty span at offset {offset}")
        if not old_bytes:
            kind = SpanKind.ADDED
        elif not new_bytes:
            kind = SpanKind.REMOVED
        else:
            kind = SpanKind.CHANGED
        return cls(offset=offset, kind=kind, old_bytes=bytes(old_bytes), new_bytes=bytes(new_bytes))

    @property
    def old_end(self) -> int:
        return self.offset + len(self.old_bytes)

    @property
    def new_end(self) -> int:
        return self.offset + len(self.new_bytes)

    @property
    def extent(self) -> int:
        """Number of positions the span occupies in either buffer."""
        return max(len(self.old_bytes), len(self.new_bytes))

    @property
    def delta(self) -> int:
        return len(self.new_bytes) - len(self.old_bytes)


@dataclass(frozen=True)
class IgnoreRange:
    """Half-open ``[start, end)`` range; ``end=None`` means unbounded."""

    start: int
    end: Optional[int] = None

    def contains(self, offset: int) -> bool:
        return offset >= self.start and (self.end is None or offset < self.end)

    def clip(self, limit: int) -> Tuple[int, int]:
        end = limit if self.end is None else min(self.end, limit)
        return min(self.start, limit), end


@dataclass(frozen=True)
class IgnoreMask:
    """Set of byte ranges excluded from comparison."""

    ranges: Tuple[IgnoreRange, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.ranges)

    def covers(self, offset: int) -> bool:
        return any(r.contains(offset) for r in self.ranges)

    def merged(self, limit: int) -> list[Tuple[int, int]]:
        """Return the ranges clipped to ``[0, limit)``, sorted and coalesced."""
        clipped = sorted(r.clip(limit) for r in self.ranges)
        merged: list[Tuple[int, int]] = []
        for start, end in clipped:
            if start >= end:
                continue
            if merged and start <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], end))
            else:
                merged.append((start, end))
        return merged

    def unmasked_segments(self, limit: int) -> Iterator[Tuple[int, int]]:
        """Yield the ``[start, end)`` segments of ``[0, limit)`` not covered by the mask."""
        cursor = 0
        for start, end in self.merged(limit):
            if start > cursor:
                yield cursor, start
            cursor = max(cursor, end)
        if cursor < limit:
            yield cursor, limit
