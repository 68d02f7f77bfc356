"""Tests for the buffer source/sink."""

from pathlib import Path

import pytest

from binfiddle.buffers import BufferIOError, backup_path, read_buffer, read_text, write_backup, write_buffer


class TestReadWrite:
    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "data.bin"
        write_buffer(path, b"\x00\x01\x02")
        assert read_buffer(path) == b"\x00\x01\x02"

    def test_replace_keeps_no_temp_files(self, tmp_path: Path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"old")
        write_buffer(path, b"new")
        assert path.read_bytes() == b"new"
        assert [p.name for p in tmp_path.iterdir()] == ["data.bin"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(BufferIOError):
            read_buffer(tmp_path / "missing.bin")

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(BufferIOError):
            write_buffer(tmp_path / "nope" / "out.bin", b"x")

    def test_read_text_rejects_binary(self, tmp_path: Path):
        path = tmp_path / "bad.patch"
        path.write_bytes(b"\xff\xfe\x00")
        with pytest.raises(BufferIOError):
            read_text(path)


class TestBackup:
    def test_backup_path(self):
        assert backup_path("dir/file.bin", ".orig") == Path("dir/file.bin.orig")

    def test_write_backup(self, tmp_path: Path):
        target = tmp_path / "file.bin"
        saved = write_backup(target, ".bak", b"before")
        assert saved == tmp_path / "file.bin.bak"
        assert saved.read_bytes() == b"before"
