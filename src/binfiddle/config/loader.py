"""Load and merge configuration from .binfiddle.toml and env vars."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from binfiddle.config.schema import (
    COLOR_MODES,
    DIFF_FORMATS,
    BinfiddleConfig,
    DiffConfig,
    OutputConfig,
    PatchConfig,
)

CONFIG_FILENAME = ".binfiddle.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(base_dir: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = base_dir / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _env_int(name: str, minimum: int) -> Optional[int]:
    val = os.environ.get(name)
    if val is None:
        return None
    try:
        number = int(val)
    except ValueError:
        return None
    return number if number >= minimum else None


def _merge_env_overrides(cfg: BinfiddleConfig) -> None:
    """Apply BINFIDDLE_* environment variable overrides."""
    if val := os.environ.get("BINFIDDLE_DIFF_FORMAT"):
        if val.lower() in DIFF_FORMATS:
            cfg.diff.format = val.lower()
    if val := os.environ.get("BINFIDDLE_COLOR"):
        if val in COLOR_MODES:
            cfg.output.color = val  # type: ignore[assignment]
    if (context := _env_int("BINFIDDLE_CONTEXT", 0)) is not None:
        cfg.diff.context = context
    if (width := _env_int("BINFIDDLE_DIFF_WIDTH", 1)) is not None:
        cfg.diff.width = width
    if (suffix := os.environ.get("BINFIDDLE_BACKUP_SUFFIX")) is not None:
        cfg.patch.backup_suffix = suffix


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    import dataclasses

    valid_fields = {f.name for f in dataclasses.fields(cls)}
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _check(cfg: BinfiddleConfig, path: Path) -> None:
    for name, value in (
        ("diff.format", cfg.diff.format),
        ("diff.ignore_offsets", cfg.diff.ignore_offsets),
        ("output.color", cfg.output.color),
        ("patch.backup_suffix", cfg.patch.backup_suffix),
    ):
        if not isinstance(value, str):
            raise ConfigError(f"{path}: {name} must be a string")
    for name, value in (("diff.summary", cfg.diff.summary), ("output.silent", cfg.output.silent)):
        if not isinstance(value, bool):
            raise ConfigError(f"{path}: {name} must be true or false")
    if cfg.diff.format.lower() not in DIFF_FORMATS:
        raise ConfigError(f"{path}: unknown diff format '{cfg.diff.format}'")
    if cfg.output.color not in COLOR_MODES:
        raise ConfigError(f"{path}: unknown color mode '{cfg.output.color}'")
    if not isinstance(cfg.diff.context, int) or cfg.diff.context < 0:
        raise ConfigError(f"{path}: diff.context must be a non-negative integer")
    if not isinstance(cfg.diff.width, int) or cfg.diff.width < 1:
        raise ConfigError(f"{path}: diff.width must be a positive integer")


def load_config(
    base_dir: Optional[Path] = None,
    config_override: Optional[str] = None,
) -> BinfiddleConfig:
    """Load, validate, and return a BinfiddleConfig."""
    config_path = find_config_file(base_dir or Path.cwd(), config_override)

    if config_path is None:
        cfg = BinfiddleConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = BinfiddleConfig(
            version=str(raw.get("version", "1.0")),
            diff=_build_section(raw, DiffConfig, "diff"),
            output=_build_section(raw, OutputConfig, "output"),
            patch=_build_section(raw, PatchConfig, "patch"),
        )
        _check(cfg, config_path)
        cfg.diff.format = cfg.diff.format.lower()

    _merge_env_overrides(cfg)
    return cfg
