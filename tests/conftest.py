"""Shared test fixtures — sample buffers and files on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Tuple

import pytest


@pytest.fixture
def deadbeef() -> Tuple[bytes, bytes]:
    """Two same-length buffers differing at offsets 1 and 3."""
    return bytes([0xDE, 0xAD, 0xBE, 0xEF]), bytes([0xDE, 0xFF, 0xBE, 0xCA])


@pytest.fixture
def grown() -> Tuple[bytes, bytes]:
    """New buffer is the old one plus two trailing bytes."""
    return b"ABCD", b"ABCDEF"


@pytest.fixture
def shrunk() -> Tuple[bytes, bytes]:
    """New buffer lost the old one's last two bytes."""
    return b"ABCDEF", b"ABCD"


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write *data* to ``tmp_path / name`` and return the path."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def file_pair(write_file, deadbeef) -> Tuple[Path, Path]:
    old, new = deadbeef
    return write_file("old.bin", old), write_file("new.bin", new)
