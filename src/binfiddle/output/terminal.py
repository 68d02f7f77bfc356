"""Rich terminal reporter — diff colouring and patch reports."""

from __future__ import annotations

from typing import IO, List, Optional, Tuple

from rich.console import Console
from rich.text import Text

from binfiddle.patch.models import ApplyMode, ApplyOutcome, FailureReason, PatchEntry

_OFFSET_RE = r"0x[0-9a-f]{8}"

_REASON_TEXT = {
    FailureReason.CONTENT_MISMATCH: "content mismatch",
    FailureReason.OUT_OF_BOUNDS: "out of bounds",
    FailureReason.OVERLAPPING: "overlaps previous entry",
}


def make_console(color: str = "auto", *, stderr: bool = False, file: Optional[IO[str]] = None) -> Console:
    """Build a Console honouring ``--color always|auto|never``."""
    return Console(
        file=file,
        stderr=stderr,
        force_terminal=True if color == "always" else None,
        color_system=None if color == "never" else "auto",
        highlight=False,
        soft_wrap=True,
    )


# ── diff ──────────────────────────────────────────────────────────────────────


def style_line(line: str, mode: str) -> Text:
    """Apply diff colouring to one plain-text output line."""
    text = Text(line)
    if mode == "simple":
        text.highlight_regex(rf"^{_OFFSET_RE}", "cyan")
        text.highlight_regex(r"old=[0-9a-f]+", "bold red")
        text.highlight_regex(r"new=[0-9a-f]+", "bold green")
        text.highlight_regex(r"EOF", "dim")
    elif mode == "unified":
        if line.startswith("--- "):
            text.stylize("bold red")
        elif line.startswith("+++ "):
            text.stylize("bold green")
        elif line.startswith("@@"):
            text.stylize("magenta")
        elif line.startswith("-"):
            text.stylize("red")
        elif line.startswith("+"):
            text.stylize("green")
        else:
            text.stylize("dim")
    elif mode == "side-by-side":
        text.highlight_regex(_OFFSET_RE, "cyan")
        text.highlight_regex(r"(?<= )!(?= )", "bold yellow")
    elif mode == "patch":
        if line.startswith("#"):
            text.stylize("dim")
        else:
            text.highlight_regex(r"^(0x)?[0-9a-fA-F]+", "cyan")
    return text


def render_diff(output: str, mode: str, console: Console) -> None:
    """Print formatted diff *output* line by line with colouring."""
    for line in output.splitlines():
        console.print(style_line(line, mode))


# ── patch ─────────────────────────────────────────────────────────────────────


def _preview(data: bytes, limit: int = 16) -> str:
    if not data:
        return "(empty)"
    if len(data) > limit:
        return f"{data[:limit].hex()}… ({len(data)} bytes)"
    return data.hex()


def _describe(entry: PatchEntry, mode: ApplyMode) -> str:
    kind = entry.kind.value if entry.kind else "empty"
    expected = entry.expected(mode)
    replacement = entry.replacement(mode)
    return f"{kind}, {_preview(expected)} → {_preview(replacement)}"


def entry_rows(outcome: ApplyOutcome) -> List[Tuple[PatchEntry, Optional[FailureReason]]]:
    """All entries in offset order, each paired with its failure reason (if any)."""
    rows: List[Tuple[PatchEntry, Optional[FailureReason]]] = [
        (entry, None) for entry in outcome.succeeded
    ]
    rows.extend(outcome.failed)
    rows.sort(key=lambda row: row[0].offset)
    return rows


def render_patch_report(outcome: ApplyOutcome, console: Console, *, verbose: bool = False) -> None:
    """Print a ✓/✗ line per entry and a final tally."""
    for entry, reason in entry_rows(outcome):
        location = f"0x{entry.offset:08x}"
        if reason is None:
            console.print(f"  [green]✓[/green] [cyan]{location}[/cyan]  {_describe(entry, outcome.mode)}")
            continue
        detail = _REASON_TEXT[reason]
        # revert positions are shifted, so only forward mismatches show the found bytes
        if reason is FailureReason.CONTENT_MISMATCH and verbose and outcome.mode is ApplyMode.FORWARD:
            expected = entry.expected(outcome.mode)
            found = outcome.original[entry.offset:entry.offset + len(expected)]
            detail += f" (expected {_preview(expected)}, found {_preview(found)})"
        if entry.line_no:
            detail += f" [dim](line {entry.line_no})[/dim]"
        console.print(f"  [red]✗[/red] [cyan]{location}[/cyan]  {detail}")

    succeeded = len(outcome.succeeded)
    failed = len(outcome.failed)
    style = "bold green" if not failed else "bold red"
    console.print()
    console.print(f"[{style}]{succeeded} succeeded, {failed} failed[/{style}]")
