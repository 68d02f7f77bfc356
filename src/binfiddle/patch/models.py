"""Patch document and application result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from binfiddle.diff.models import ByteSpan, SpanKind


class ApplyMode(str, Enum):
    FORWARD = "forward"
    REVERT = "revert"


class FailureReason(str, Enum):
    CONTENT_MISMATCH = "content_mismatch"
    OUT_OF_BOUNDS = "out_of_bounds"
    OVERLAPPING = "overlapping"


@dataclass(frozen=True)
class PatchEntry:
    """One ``OFFSET:OLD_HEX:NEW_HEX`` line. Empty hex encodes an absent side."""

    offset: int
    old_hex: str = ""
    new_hex: str = ""
    line_no: int = field(default=0, compare=False)  # 0 if generated

    @classmethod
    def from_span(cls, span: ByteSpan) -> "PatchEntry":
        return cls(offset=span.offset, old_hex=span.old_bytes.hex(), new_hex=span.new_bytes.hex())

    @property
    def old_bytes(self) -> bytes:
        return bytes.fromhex(self.old_hex)

    @property
    def new_bytes(self) -> bytes:
        return bytes.fromhex(self.new_hex)

    @property
    def kind(self) -> Optional[SpanKind]:
        """Span kind this entry encodes, or None when both sides are empty."""
        if self.old_hex and self.new_hex:
            return SpanKind.CHANGED
        if self.new_hex:
            return SpanKind.ADDED
        if self.old_hex:
            return SpanKind.REMOVED
        return None

    def to_span(self) -> ByteSpan:
        return ByteSpan.between(self.offset, self.old_bytes, self.new_bytes)

    def expected(self, mode: ApplyMode) -> bytes:
        """Bytes that must be present in the target before applying."""
        return self.old_bytes if mode is ApplyMode.FORWARD else self.new_bytes

    def replacement(self, mode: ApplyMode) -> bytes:
        """Bytes written in place of :meth:`expected`."""
        return self.new_bytes if mode is ApplyMode.FORWARD else self.old_bytes


@dataclass
class PatchDocument:
    """Parsed or generated patch file."""

    entries: List[PatchEntry] = field(default_factory=list)
    source_label: str = ""
    target_label: str = ""

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass
class ApplyOutcome:
    """Result of validating (and possibly applying) a patch to one buffer."""

    mode: ApplyMode = ApplyMode.FORWARD
    dry_run: bool = False
    succeeded: List[PatchEntry] = field(default_factory=list)
    failed: List[Tuple[PatchEntry, FailureReason]] = field(default_factory=list)
    original: bytes = b""
    patched: Optional[bytes] = None  # set only when the patch was committed

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def committed(self) -> bool:
        return self.patched is not None
