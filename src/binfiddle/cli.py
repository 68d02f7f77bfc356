"""binfiddle CLI — Typer application with diff, patch, and init commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from binfiddle import __version__

app = typer.Typer(
    name="binfiddle",
    help="Compare binary files and apply byte-level patches.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

LARGE_DIFF_BYTES = 10_000


def _fail(label: str, exc: Exception, code: int = 2) -> typer.Exit:
    console.print(f"[bold red]{escape(label)}:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=code)


def _load_config(config: Optional[str], verbose: bool = False):
    from binfiddle.config.loader import ConfigError, find_config_file, load_config

    try:
        cfg = load_config(Path.cwd(), config)
        source = find_config_file(Path.cwd(), config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc
    if verbose:
        console.print(f"[dim]Config: {escape(str(source)) if source else 'built-in defaults'}[/dim]")
    return cfg


def _resolve_color(color: Optional[str], default: str) -> str:
    from binfiddle.config.schema import COLOR_MODES

    value = color or default
    if value not in COLOR_MODES:
        console.print(f"[bold red]Invalid color mode:[/bold red] {escape(value)}")
        raise typer.Exit(code=2)
    return value


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    old: str = typer.Argument(..., help="Original file"),
    new: str = typer.Argument(..., help="Modified file"),
    diff_format: Optional[str] = typer.Option(
        None, "--diff-format", help="simple | unified | side-by-side | patch | summary | auto"
    ),
    context: Optional[int] = typer.Option(None, "--context", min=0, help="Context bytes around each hunk"),
    ignore_offsets: Optional[str] = typer.Option(
        None, "--ignore-offsets", help='Ranges to ignore, e.g. "0x0..0x10,0x100..0x200"'
    ),
    diff_width: Optional[int] = typer.Option(None, "--diff-width", min=1, help="Bytes per output row"),
    summary: bool = typer.Option(False, "--summary", help="Append a one-line summary"),
    color: Optional[str] = typer.Option(None, "--color", help="always | auto | never"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the result to a file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .binfiddle.toml"),
    silent: bool = typer.Option(False, "--silent", help="Suppress notices and warnings"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Compare two binary files and show their differences."""
    from binfiddle.buffers import BufferIOError, read_buffer, write_buffer
    from binfiddle.diff import IgnoreRangeParseError, compute_diff, diff_stats, parse_ignore_ranges
    from binfiddle.output import FormatError, auto_select, format_diff, normalise_format, summary_line
    from binfiddle.output.terminal import make_console, render_diff

    cfg = _load_config(config, verbose)

    # --- CLI overrides ---
    try:
        fmt = normalise_format(diff_format or cfg.diff.format)
    except FormatError as exc:
        raise _fail("Invalid format", exc) from exc
    color_mode = _resolve_color(color, cfg.output.color)
    context_bytes = cfg.diff.context if context is None else context
    width = cfg.diff.width if diff_width is None else diff_width
    show_summary = summary or cfg.diff.summary
    quiet = silent or cfg.output.silent

    try:
        mask = parse_ignore_ranges(cfg.diff.ignore_offsets if ignore_offsets is None else ignore_offsets)
    except IgnoreRangeParseError as exc:
        raise _fail("Invalid ignore range", exc) from exc

    # --- Load buffers ---
    try:
        old_data = read_buffer(old)
        new_data = read_buffer(new)
    except BufferIOError as exc:
        raise _fail("Error", exc) from exc

    spans = compute_diff(old_data, new_data, mask)
    stats = diff_stats(spans, len(old_data), len(new_data))
    if fmt == "auto":
        fmt = auto_select(stats)

    if verbose:
        console.print(f"[dim]{escape(old)}: {len(old_data)} bytes, {escape(new)}: {len(new_data)} bytes[/dim]")
        console.print(f"[dim]Spans: {stats.total_spans} ({stats.differing_bytes} bytes differ)[/dim]")
        console.print(f"[dim]Format: {fmt}[/dim]")

    if stats.differing_bytes > LARGE_DIFF_BYTES and not quiet:
        largest = max(len(old_data), len(new_data))
        console.print(
            f"[yellow]⚠[/yellow]  Large diff detected: {stats.differing_bytes} differing bytes "
            f"({stats.differing_bytes / largest * 100:.1f}% of file)"
        )
        if fmt == "simple":
            console.print("   Consider --diff-format summary or --diff-format unified.")

    identical = not spans and fmt not in ("patch", "summary")
    if identical:
        if not quiet:
            console.print("[dim]Files are identical[/dim]")
        if not output:
            if show_summary:
                print(summary_line(stats))
            raise typer.Exit(code=0)

    text = "" if identical else format_diff(
        spans,
        old_data,
        new_data,
        fmt,
        context=context_bytes,
        width=width,
        old_label=old,
        new_label=new,
    )

    # --- Write to file ---
    if output:
        # an identical pair still replaces whatever an earlier run left at OUTPUT
        parts = [part for part in (text, summary_line(stats) if show_summary else "") if part]
        report = "\n\n".join(parts)
        try:
            write_buffer(output, (report + "\n" if report else "").encode("utf-8"))
        except BufferIOError as exc:
            raise _fail("Error", exc) from exc
        if verbose:
            console.print(f"[dim]Written to {escape(output)}[/dim]")
        raise typer.Exit(code=0)

    out = make_console(color_mode)
    render_diff(text, fmt, out)
    if show_summary:
        out.print()
        out.print(Text(summary_line(stats), style="bold"))


# ── patch ─────────────────────────────────────────────────────────────────────


@app.command()
def patch(
    target: str = typer.Argument(..., help="File to patch"),
    patch_file: str = typer.Argument(..., help="Patch produced by 'diff --diff-format patch'"),
    backup: Optional[str] = typer.Option(None, "--backup", help="Keep the original as <target><SUFFIX>"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate only, write nothing"),
    revert: bool = typer.Option(False, "--revert", help="Undo a previously applied patch"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the patched data here instead of the target ('-' for stdout)"
    ),
    color: Optional[str] = typer.Option(None, "--color", help="always | auto | never"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .binfiddle.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Validate a patch against TARGET and apply it all-or-nothing."""
    from binfiddle.buffers import BufferIOError, read_buffer, read_text, write_backup, write_buffer
    from binfiddle.output.terminal import make_console, render_patch_report
    from binfiddle.patch import ApplyMode, PatchParseError, apply, parse

    cfg = _load_config(config, verbose)
    report_console = make_console(_resolve_color(color, cfg.output.color), stderr=True)

    try:
        document = parse(read_text(patch_file))
    except PatchParseError as exc:
        raise _fail(f"Patch parse error in {patch_file}", exc) from exc
    except BufferIOError as exc:
        raise _fail("Error", exc) from exc

    try:
        data = read_buffer(target)
    except BufferIOError as exc:
        raise _fail("Error", exc) from exc

    mode = ApplyMode.REVERT if revert else ApplyMode.FORWARD
    if verbose:
        console.print(f"[dim]Entries: {document.entry_count}, mode: {mode.value}[/dim]")
        if document.source_label or document.target_label:
            console.print(
                f"[dim]Patch: {escape(document.source_label)} → {escape(document.target_label)}[/dim]"
            )

    outcome = apply(data, document, mode, dry_run=dry_run)

    if dry_run or not outcome.ok or verbose:
        render_patch_report(outcome, report_console, verbose=verbose)

    if not outcome.ok:
        console.print("[bold red]✗ Validation failed — no changes written.[/bold red]")
        raise typer.Exit(code=1)
    if dry_run:
        console.print("[bold]Dry run — no changes written.[/bold]")
        raise typer.Exit(code=0)

    assert outcome.patched is not None
    suffix = cfg.patch.backup_suffix if backup is None else backup
    destination = output or target
    try:
        if suffix:
            saved = write_backup(target, suffix, outcome.original)
            if verbose:
                console.print(f"[dim]Backup written to {escape(str(saved))}[/dim]")
        write_buffer(destination, outcome.patched)
    except BufferIOError as exc:
        raise _fail("Error", exc) from exc

    if destination != "-":
        console.print(
            f"[green]✓[/green] Applied {len(outcome.succeeded)} entr"
            f"{'y' if len(outcome.succeeded) == 1 else 'ies'} to {escape(destination)}"
        )


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .binfiddle.toml in the current directory."""
    from binfiddle.config.defaults import DEFAULT_TOML
    from binfiddle.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"binfiddle {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """binfiddle — compare binary files and apply byte-level patches."""
