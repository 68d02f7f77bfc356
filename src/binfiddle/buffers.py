"""Byte buffer source/sink — file reads, atomic writes, backups."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class BufferIOError(Exception):
    """Raised when a buffer cannot be read or written."""


def read_buffer(path: PathLike) -> bytes:
    """Read a whole file into memory. ``-`` reads stdin."""
    if str(path) == "-":
        return sys.stdin.buffer.read()
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise BufferIOError(f"cannot read {path}: {exc.strerror or exc}") from exc


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file (patch files)."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise BufferIOError(f"{path} is not UTF-8 text") from exc
    except OSError as exc:
        raise BufferIOError(f"cannot read {path}: {exc.strerror or exc}") from exc


def write_buffer(path: PathLike, data: bytes) -> None:
    """Replace *path* with *data* atomically. ``-`` writes to stdout."""
    if str(path) == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return

    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=directory)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            if target.exists():
                os.chmod(tmp_name, target.stat().st_mode & 0o7777)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise BufferIOError(f"cannot write {path}: {exc.strerror or exc}") from exc


def backup_path(path: PathLike, suffix: str) -> Path:
    """Return ``<path><suffix>``."""
    return Path(f"{path}{suffix}")


def write_backup(path: PathLike, suffix: str, data: bytes) -> Path:
    """Persist the pre-mutation buffer next to *path*. Returns the backup path."""
    destination = backup_path(path, suffix)
    write_buffer(destination, data)
    return destination
