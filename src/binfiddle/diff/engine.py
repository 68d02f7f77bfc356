"""Positional diff engine.

Walks the region shared by both buffers once, coalescing runs of
differing bytes into CHANGED spans, then emits at most one trailing
ADDED or REMOVED span for the length difference. There is no alignment
search: a patch produced from these spans applies at exact offsets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from binfiddle.diff.models import ByteSpan, IgnoreMask, SpanKind


def compute_diff(
    old: bytes,
    new: bytes,
    ignore: Optional[IgnoreMask] = None,
) -> List[ByteSpan]:
    """Return the ordered, non-overlapping spans where *old* and *new* differ.

    Positions covered by *ignore* compare equal. A span never crosses an
    ignored position, it is closed at the mask boundary instead.
    """
    mask = ignore or IgnoreMask()
    shared = min(len(old), len(new))
    spans: List[ByteSpan] = []

    for seg_start, seg_end in mask.unmasked_segments(shared):
        run_start = -1
        for i in range(seg_start, seg_end):
            if old[i] != new[i]:
                if run_start < 0:
                    run_start = i
            elif run_start >= 0:
                spans.append(ByteSpan.between(run_start, old[run_start:i], new[run_start:i]))
                run_start = -1
        if run_start >= 0:
            spans.append(
                ByteSpan.between(run_start, old[run_start:seg_end], new[run_start:seg_end])
            )

    if len(old) > shared:
        spans.append(ByteSpan.between(shared, old[shared:], b""))
    elif len(new) > shared:
        spans.append(ByteSpan.between(shared, b"", new[shared:]))

    return spans


@dataclass(frozen=True)
class DiffStats:
    """Aggregate counts over a span sequence."""

    changed: int
    added: int
    removed: int
    differing_bytes: int
    old_size: int
    new_size: int

    @property
    def total_spans(self) -> int:
        return self.changed + self.added + self.removed

    @property
    def size_delta(self) -> int:
        return self.new_size - self.old_size

    @property
    def identical(self) -> bool:
        return self.total_spans == 0


def diff_stats(spans: Sequence[ByteSpan], old_size: int, new_size: int) -> DiffStats:
    """Count spans per kind and the number of byte positions they cover."""
    counts = {kind: 0 for kind in SpanKind}
    for span in spans:
        counts[span.kind] += 1
    return DiffStats(
        changed=counts[SpanKind.CHANGED],
        added=counts[SpanKind.ADDED],
        removed=counts[SpanKind.REMOVED],
        differing_bytes=sum(span.extent for span in spans),
        old_size=old_size,
        new_size=new_size,
    )
