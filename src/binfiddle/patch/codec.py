"""Line-based patch file codec.

Format::

    # binfiddle patch file
    # source: <label>
    # target: <label>
    # format: OFFSET:OLD_HEX:NEW_HEX
    # differences: <N>
    #
    0x00000100:deadbeef:cafebabe
    0x00000200::0102            <- added (old side empty)
    0x00000300:ff:              <- removed (new side empty)
"""

from __future__ import annotations

import re
from typing import Iterable, List

from binfiddle.diff.models import ByteSpan
from binfiddle.patch.models import PatchDocument, PatchEntry

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_LABEL_RE = re.compile(r"^#\s*(source|target):\s?(.*)$")


class PatchParseError(ValueError):
    """Raised on a malformed patch line."""

    def __init__(self, line_no: int, message: str) -> None:
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


def to_document(
    spans: Iterable[ByteSpan],
    source_label: str = "",
    target_label: str = "",
) -> PatchDocument:
    """Map a span sequence one-to-one onto a PatchDocument."""
    return PatchDocument(
        entries=[PatchEntry.from_span(span) for span in spans],
        source_label=source_label,
        target_label=target_label,
    )


def render(document: PatchDocument) -> str:
    """Return the patch file text for *document*."""
    lines = [
        "# binfiddle patch file",
        f"# source: {document.source_label}",
        f"# target: {document.target_label}",
        "# format: OFFSET:OLD_HEX:NEW_HEX",
        f"# differences: {document.entry_count}",
        "#",
    ]
    for entry in document.entries:
        lines.append(f"0x{entry.offset:08x}:{entry.old_hex.lower()}:{entry.new_hex.lower()}")
    return "\n".join(lines) + "\n"


def serialize(
    spans: Iterable[ByteSpan],
    source_label: str = "",
    target_label: str = "",
) -> str:
    """Serialize *spans* straight to patch text."""
    return render(to_document(spans, source_label, target_label))


def _parse_hex_field(value: str, name: str, line_no: int) -> str:
    if not _HEX_RE.match(value):
        raise PatchParseError(line_no, f"{name} is not valid hex: '{value}'")
    if len(value) % 2:
        raise PatchParseError(line_no, f"{name} has an odd number of hex digits: '{value}'")
    return value.lower()


def parse_line(line: str, line_no: int = 0) -> PatchEntry:
    """Parse a single data line."""
    fields = line.split(":")
    if len(fields) != 3:
        raise PatchParseError(line_no, f"expected OFFSET:OLD_HEX:NEW_HEX, got {len(fields)} field(s)")

    offset_text, old_hex, new_hex = (f.strip() for f in fields)
    digits = offset_text[2:] if offset_text[:2] in ("0x", "0X") else offset_text
    if not digits or not _HEX_RE.match(digits):
        raise PatchParseError(line_no, f"offset is not valid hex: '{offset_text}'")

    return PatchEntry(
        offset=int(digits, 16),
        old_hex=_parse_hex_field(old_hex, "old hex", line_no),
        new_hex=_parse_hex_field(new_hex, "new hex", line_no),
        line_no=line_no,
    )


def parse(text: str) -> PatchDocument:
    """Parse patch text. Comment and blank lines are skipped.

    The ``source``/``target`` header comments, when present, populate the
    document labels. Raises PatchParseError on the first malformed line.
    """
    document = PatchDocument()
    entries: List[PatchEntry] = []

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            m = _LABEL_RE.match(line)
            if m:
                if m.group(1) == "source":
                    document.source_label = m.group(2).strip()
                else:
                    document.target_label = m.group(2).strip()
            continue
        entries.append(parse_line(line, line_no))

    document.entries = entries
    return document
