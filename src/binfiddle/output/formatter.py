"""Plain-text renderers for diff results.

Renderers return text without a trailing newline and never mutate their
inputs. Colour is applied afterwards by :mod:`binfiddle.output.terminal`.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from binfiddle.diff.engine import DiffStats, diff_stats
from binfiddle.diff.models import ByteSpan
from binfiddle.patch import codec

FORMATS = ("simple", "unified", "side-by-side", "patch", "summary")

_ALIASES = {
    "sidebyside": "side-by-side",
    "side": "side-by-side",
}


class FormatError(ValueError):
    """Raised for an unrecognised output format."""


def normalise_format(name: str, *, allow_auto: bool = True) -> str:
    """Return the canonical format name for *name*."""
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    if key in FORMATS or (allow_auto and key == "auto"):
        return key
    supported = ", ".join(FORMATS + (("auto",) if allow_auto else ()))
    raise FormatError(f"Unknown diff format: '{name}'. Supported: {supported}")


def auto_select(stats: DiffStats) -> str:
    """Pick a format from how much of the larger file differs."""
    largest = max(stats.old_size, stats.new_size)
    if largest == 0 or stats.identical:
        return "simple"
    ratio = stats.differing_bytes / largest
    if ratio < 0.01:
        return "simple"
    if ratio < 0.50:
        return "unified"
    return "summary"


def format_diff(
    spans: Sequence[ByteSpan],
    old: bytes,
    new: bytes,
    mode: str,
    *,
    context: int = 3,
    width: int = 16,
    old_label: str = "old",
    new_label: str = "new",
) -> str:
    """Render *spans* in the given *mode*."""
    mode = normalise_format(mode, allow_auto=False)
    width = max(width, 1)
    context = max(context, 0)

    if mode == "simple":
        return format_simple(spans)
    if mode == "unified":
        return format_unified(spans, old, new, context, width, old_label, new_label)
    if mode == "side-by-side":
        return format_side_by_side(spans, old, new, context, width, old_label, new_label)
    if mode == "patch":
        return codec.serialize(spans, old_label, new_label).rstrip("\n")
    return format_summary_report(spans, old, new, old_label, new_label)


# ── simple ────────────────────────────────────────────────────────────────────


def format_simple(spans: Sequence[ByteSpan]) -> str:
    lines = []
    for span in spans:
        old_hex = span.old_bytes.hex() or "EOF"
        new_hex = span.new_bytes.hex() or "EOF"
        lines.append(f"0x{span.offset:08x}: old={old_hex} != new={new_hex}")
    return "\n".join(lines)


# ── hunks & hex rows ──────────────────────────────────────────────────────────


def _span_end(span: ByteSpan) -> int:
    return span.offset + span.extent


def group_hunks(spans: Sequence[ByteSpan], context: int) -> List[List[ByteSpan]]:
    """Group spans whose context windows touch or overlap."""
    hunks: List[List[ByteSpan]] = []
    for span in spans:
        if hunks and span.offset - _span_end(hunks[-1][-1]) <= 2 * context:
            hunks[-1].append(span)
        else:
            hunks.append([span])
    return hunks


def _row_has_span(row_start: int, row_end: int, spans: Sequence[ByteSpan]) -> bool:
    return any(s.offset < row_end and _span_end(s) > row_start for s in spans)


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def _hex_cells(data: bytes, start: int, end: int, missing: str) -> List[str]:
    return [f"{data[p]:02x}" if p < len(data) else missing for p in range(start, end)]


def _unified_row(marker: str, data: bytes, start: int, end: int, width: int) -> str:
    cells = " ".join(_hex_cells(data, start, end, "--"))
    gutter = "".join(_printable(data[p]) if p < len(data) else " " for p in range(start, end))
    return f"{marker}0x{start:08x}: {cells:<{width * 3 - 1}}  |{gutter}|"


def _side_cell(data: bytes, start: int, end: int, width: int) -> str:
    cells = " ".join(_hex_cells(data, start, end, "  "))
    return f"0x{start:08x}: {cells:<{width * 3 - 1}}"


def _hunk_bounds(hunk: Sequence[ByteSpan], old: bytes, new: bytes, context: int):
    start = max(0, hunk[0].offset - context)
    stop = _span_end(hunk[-1]) + context
    return start, min(len(old), stop), min(len(new), stop)


# ── unified ───────────────────────────────────────────────────────────────────


def format_unified(
    spans: Sequence[ByteSpan],
    old: bytes,
    new: bytes,
    context: int,
    width: int,
    old_label: str,
    new_label: str,
) -> str:
    if not spans:
        return ""

    lines = [f"--- {old_label}", f"+++ {new_label}"]
    for hunk in group_hunks(spans, context):
        start, end_old, end_new = _hunk_bounds(hunk, old, new, context)
        end = max(end_old, end_new)
        lines.append(
            f"@@ -0x{start:x},0x{end_old - start:x} +0x{start:x},0x{end_new - start:x} @@"
        )
        row = start
        while row < end:
            row_end = min(row + width, end)
            if _row_has_span(row, row_end, hunk):
                if row < len(old):
                    lines.append(_unified_row("-", old, row, row_end, width))
                if row < len(new):
                    lines.append(_unified_row("+", new, row, row_end, width))
            else:
                lines.append(_unified_row(" ", old, row, row_end, width))
            row = row_end
    return "\n".join(lines)


# ── side-by-side ──────────────────────────────────────────────────────────────


def format_side_by_side(
    spans: Sequence[ByteSpan],
    old: bytes,
    new: bytes,
    context: int,
    width: int,
    old_label: str,
    new_label: str,
) -> str:
    if not spans:
        return ""

    half = 12 + width * 3 - 1
    lines = [
        f"{old_label:<{half}} | {new_label}",
        f"{'':-<{half}}-+-{'':-<{half}}",
    ]
    # rows are width-aligned, so hunks that land on a shared row print as one block
    blocks: List[Tuple[int, int, List[ByteSpan]]] = []
    for hunk in group_hunks(spans, context):
        start, end_old, end_new = _hunk_bounds(hunk, old, new, context)
        end = max(end_old, end_new)
        row = (start // width) * width
        if blocks and row <= blocks[-1][1]:
            first, last, members = blocks[-1]
            blocks[-1] = (first, max(last, end), members + list(hunk))
        else:
            blocks.append((row, end, list(hunk)))

    for index, (row, end, hunk) in enumerate(blocks):
        if index:
            lines.append("")
        while row < end:
            row_end = min(row + width, end)
            marker = "!" if _row_has_span(row, row_end, hunk) else " "
            left = _side_cell(old, row, row_end, width)
            right = _side_cell(new, row, row_end, width)
            lines.append(f"{left:<{half}} {marker} {right}".rstrip())
            row = row_end
    return "\n".join(lines)


# ── summary ───────────────────────────────────────────────────────────────────


def summary_line(stats: DiffStats) -> str:
    """One-line aggregate used by ``--summary``."""
    return (
        f"{stats.total_spans} difference(s): {stats.changed} changed, "
        f"{stats.removed} removed, {stats.added} added; "
        f"size delta {stats.size_delta:+d} bytes "
        f"(old: {stats.old_size} bytes, new: {stats.new_size} bytes)"
    )


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def _assessment(percent: float) -> List[str]:
    if percent > 80.0:
        return [
            "  Files are substantially different (>80% changed)",
            "  Likely: major version update, recompilation, or different builds",
        ]
    if percent > 50.0:
        return [
            "  Files have major differences (50-80% changed)",
            "  Likely: significant refactoring or feature additions",
        ]
    if percent > 10.0:
        return [
            "  Files have moderate differences (10-50% changed)",
            "  Likely: bug fixes, minor updates, or targeted changes",
        ]
    if percent > 0.0:
        return [
            "  Files have minor differences (<10% changed)",
            "  Likely: patch, hotfix, or configuration change",
        ]
    return ["  Files are identical"]


def format_summary_report(
    spans: Sequence[ByteSpan],
    old: bytes,
    new: bytes,
    old_label: str,
    new_label: str,
) -> str:
    """Multi-line statistical overview without byte-level detail."""
    stats = diff_stats(spans, len(old), len(new))
    lines = [
        "Binary Diff Summary",
        "===================",
        "",
        f"File 1: {old_label} ({format_size(stats.old_size)})",
        f"File 2: {new_label} ({format_size(stats.new_size)})",
        "",
    ]

    largest = max(stats.old_size, stats.new_size)
    if largest == 0:
        lines.append("Both files are empty")
        return "\n".join(lines)

    percent = stats.differing_bytes / largest * 100.0
    lines.append("Overview:")
    lines.append(
        f"  Differing bytes:   {stats.differing_bytes:>10} ({percent:5.1f}% of file)"
    )
    lines.append(f"  Spans:             {stats.total_spans:>10}")
    lines.append(f"  Changed spans:     {stats.changed:>10}")
    if stats.removed:
        lines.append(f"  Removed spans:     {stats.removed:>10} (old file larger)")
    if stats.added:
        lines.append(f"  Added spans:       {stats.added:>10} (new file larger)")
    if stats.size_delta:
        lines.append(f"  File size change:  {stats.size_delta:>+10} bytes")

    lines.append("")
    lines.append("Assessment:")
    lines.extend(_assessment(percent))

    if not stats.identical:
        lines.append("")
        lines.append("Suggestions:")
        lines.append("  --diff-format unified      : view grouped changes with context")
        lines.append("  --diff-format patch        : generate a machine-readable patch")
        lines.append("  --diff-format side-by-side : two-column hex comparison")

    return "\n".join(lines)
