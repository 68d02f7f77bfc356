"""Transactional patch application.

Every entry is validated against the target before anything is written.
Only when all entries validate (and this is not a dry run) is a new
buffer built, in a single ascending pass over fresh output, so entries
that change length never shift the offsets of later ones.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from binfiddle.patch.models import (
    ApplyMode,
    ApplyOutcome,
    FailureReason,
    PatchDocument,
    PatchEntry,
)


def _ordered(document: PatchDocument) -> List[PatchEntry]:
    return sorted(document.entries, key=lambda e: e.offset)


def _positions(entries: List[PatchEntry], mode: ApplyMode) -> List[int]:
    """Map each entry's offset into the coordinates of the buffer being patched.

    Forward patches target the source image, where offsets are exact. A
    revert targets the forward image, so each offset moves by the length
    change of every entry before it.
    """
    if mode is ApplyMode.FORWARD:
        return [e.offset for e in entries]
    positions: List[int] = []
    shift = 0
    for entry in entries:
        positions.append(entry.offset + shift)
        shift += len(entry.new_hex) // 2 - len(entry.old_hex) // 2
    return positions


def validate(
    target: bytes,
    document: PatchDocument,
    mode: ApplyMode = ApplyMode.FORWARD,
) -> Tuple[List[Tuple[int, PatchEntry]], List[Tuple[PatchEntry, FailureReason]]]:
    """Check every entry against *target* without mutating anything.

    Returns ``(valid, failed)`` where *valid* pairs each passing entry with
    its resolved position in *target*.
    """
    entries = _ordered(document)
    valid: List[Tuple[int, PatchEntry]] = []
    failed: List[Tuple[PatchEntry, FailureReason]] = []
    prev_end = 0

    for position, entry in zip(_positions(entries, mode), entries):
        expected = entry.expected(mode)
        end = position + len(expected)

        if position < prev_end:
            failed.append((entry, FailureReason.OVERLAPPING))
        elif end > len(target):
            failed.append((entry, FailureReason.OUT_OF_BOUNDS))
        elif target[position:end] != expected:
            failed.append((entry, FailureReason.CONTENT_MISMATCH))
        else:
            valid.append((position, entry))
        prev_end = max(prev_end, end)

    return valid, failed


def _rebuild(target: bytes, placed: List[Tuple[int, PatchEntry]], mode: ApplyMode) -> bytes:
    out = bytearray()
    cursor = 0
    for position, entry in placed:
        out += target[cursor:position]
        out += entry.replacement(mode)
        cursor = position + len(entry.expected(mode))
    out += target[cursor:]
    return bytes(out)


def apply(
    target: bytes,
    document: PatchDocument,
    mode: ApplyMode = ApplyMode.FORWARD,
    *,
    dry_run: bool = False,
) -> ApplyOutcome:
    """Validate *document* against *target* and apply it if every entry passes.

    The returned outcome always carries the untouched input as ``original``.
    ``patched`` is set only when the patch was committed.
    """
    original = bytes(target)
    valid, failed = validate(original, document, mode)

    patched: Optional[bytes] = None
    if not failed and not dry_run:
        patched = _rebuild(original, valid, mode)

    return ApplyOutcome(
        mode=mode,
        dry_run=dry_run,
        succeeded=[entry for _, entry in valid],
        failed=failed,
        original=original,
        patched=patched,
    )


def revert(target: bytes, document: PatchDocument, *, dry_run: bool = False) -> ApplyOutcome:
    """Undo *document* on a buffer it was previously applied to."""
    return apply(target, document, ApplyMode.REVERT, dry_run=dry_run)
