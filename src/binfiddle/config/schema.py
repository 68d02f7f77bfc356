"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

ColorMode = Literal["always", "auto", "never"]

DIFF_FORMATS = ("auto", "simple", "unified", "side-by-side", "patch", "summary")
COLOR_MODES = ("always", "auto", "never")


@dataclass
class DiffConfig:
    format: str = "auto"  # auto | simple | unified | side-by-side | patch | summary
    context: int = 3  # bytes of unchanged data around each hunk
    width: int = 16  # bytes per hex-dump row
    summary: bool = False
    ignore_offsets: str = ""  # e.g. "0x0..0x10,0x100..0x200"


@dataclass
class OutputConfig:
    color: ColorMode = "auto"
    silent: bool = False


@dataclass
class PatchConfig:
    backup_suffix: str = ""  # empty = no backup


@dataclass
class BinfiddleConfig:
    version: str = "1.0"
    diff: DiffConfig = field(default_factory=DiffConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    patch: PatchConfig = field(default_factory=PatchConfig)
