"""Tests for the CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from binfiddle.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in (
        "BINFIDDLE_DIFF_FORMAT",
        "BINFIDDLE_COLOR",
        "BINFIDDLE_CONTEXT",
        "BINFIDDLE_DIFF_WIDTH",
        "BINFIDDLE_BACKUP_SUFFIX",
    ):
        monkeypatch.delenv(name, raising=False)


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "binfiddle" in result.output


class TestInit:
    def test_creates_config(self, tmp_path: Path):
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (tmp_path / ".binfiddle.toml").exists()

    def test_refuses_overwrite(self, tmp_path: Path):
        (tmp_path / ".binfiddle.toml").write_text("existing")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert (tmp_path / ".binfiddle.toml").read_text() == "existing"


class TestDiff:
    def test_simple(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "--diff-format", "simple", "--color", "never"])
        assert result.exit_code == 0
        assert "0x00000001: old=ad != new=ff" in result.output
        assert "0x00000003: old=ef != new=ca" in result.output

    def test_identical(self, write_file):
        a = write_file("a.bin", b"same")
        b = write_file("b.bin", b"same")
        result = runner.invoke(app, ["diff", str(a), str(b)])
        assert result.exit_code == 0
        assert "Files are identical" in result.output

    def test_summary_flag(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "--summary", "--color", "never"])
        assert result.exit_code == 0
        assert "2 difference(s): 2 changed" in result.output

    def test_unified(self, file_pair):
        old, new = file_pair
        result = runner.invoke(
            app, ["diff", str(old), str(new), "--diff-format", "unified", "--context", "1", "--color", "never"]
        )
        assert result.exit_code == 0
        assert "@@ -0x0,0x4 +0x0,0x4 @@" in result.output

    def test_ignore_offsets(self, file_pair):
        old, new = file_pair
        result = runner.invoke(
            app,
            ["diff", str(old), str(new), "--diff-format", "simple", "--ignore-offsets", "1", "--color", "never"],
        )
        assert result.exit_code == 0
        assert "0x00000001" not in result.output
        assert "0x00000003" in result.output

    def test_patch_to_file(self, file_pair, tmp_path: Path):
        old, new = file_pair
        out = tmp_path / "changes.patch"
        result = runner.invoke(app, ["diff", str(old), str(new), "--diff-format", "patch", "-o", str(out)])
        assert result.exit_code == 0
        text = out.read_text()
        assert text.startswith("# binfiddle patch file\n")
        assert text.endswith("0x00000001:ad:ff\n0x00000003:ef:ca\n")

    def test_identical_with_output_replaces_stale_report(self, write_file, tmp_path: Path):
        a = write_file("a.bin", b"same")
        b = write_file("b.bin", b"same")
        out = tmp_path / "out.txt"
        out.write_text("0x00000001: old=ad != new=ff\n")
        result = runner.invoke(app, ["diff", str(a), str(b), "--diff-format", "simple", "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text() == ""

    def test_identical_with_output_and_summary(self, write_file, tmp_path: Path):
        a = write_file("a.bin", b"same")
        b = write_file("b.bin", b"same")
        out = tmp_path / "out.txt"
        result = runner.invoke(app, ["diff", str(a), str(b), "--summary", "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text().startswith("0 difference(s): 0 changed")

    def test_verbose_names_config_file(self, file_pair, tmp_path: Path):
        old, new = file_pair
        (tmp_path / ".binfiddle.toml").write_text("[diff]\ncontext = 2\n")
        result = runner.invoke(app, ["diff", str(old), str(new), "-v", "--color", "never"])
        assert result.exit_code == 0
        assert "Config:" in result.output
        assert "built-in defaults" not in result.output

    def test_verbose_without_config_file(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "-v", "--color", "never"])
        assert result.exit_code == 0
        assert "built-in defaults" in result.output

    def test_non_string_ignore_offsets_in_config(self, file_pair, tmp_path: Path):
        old, new = file_pair
        (tmp_path / ".binfiddle.toml").write_text("[diff]\nignore_offsets = 5\n")
        result = runner.invoke(app, ["diff", str(old), str(new)])
        assert result.exit_code == 2
        assert "Config error" in result.output

    def test_format_from_config(self, file_pair, tmp_path: Path):
        old, new = file_pair
        (tmp_path / ".binfiddle.toml").write_text('[diff]\nformat = "patch"\n')
        result = runner.invoke(app, ["diff", str(old), str(new), "--color", "never"])
        assert result.exit_code == 0
        assert "# binfiddle patch file" in result.output

    def test_bad_format(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "--diff-format", "fancy"])
        assert result.exit_code == 2

    def test_bad_color(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "--color", "rainbow"])
        assert result.exit_code == 2

    def test_bad_ignore_range(self, file_pair):
        old, new = file_pair
        result = runner.invoke(app, ["diff", str(old), str(new), "--ignore-offsets", "9..2"])
        assert result.exit_code == 2

    def test_missing_file(self, file_pair, tmp_path: Path):
        old, _ = file_pair
        result = runner.invoke(app, ["diff", str(old), str(tmp_path / "missing.bin")])
        assert result.exit_code == 2


def _make_patch(old: Path, new: Path, dest: Path) -> Path:
    result = runner.invoke(app, ["diff", str(old), str(new), "--diff-format", "patch", "-o", str(dest)])
    assert result.exit_code == 0
    return dest


class TestPatch:
    def test_apply_in_place(self, file_pair, tmp_path: Path):
        old, new = file_pair
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        result = runner.invoke(app, ["patch", str(old), str(patch_file)])
        assert result.exit_code == 0
        assert old.read_bytes() == new.read_bytes()
        assert "Applied" in result.output

    def test_backup(self, file_pair, tmp_path: Path):
        old, new = file_pair
        before = old.read_bytes()
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        result = runner.invoke(app, ["patch", str(old), str(patch_file), "--backup", ".orig"])
        assert result.exit_code == 0
        assert Path(f"{old}.orig").read_bytes() == before
        assert old.read_bytes() == new.read_bytes()

    def test_output_elsewhere(self, file_pair, tmp_path: Path):
        old, new = file_pair
        before = old.read_bytes()
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        out = tmp_path / "patched.bin"
        result = runner.invoke(app, ["patch", str(old), str(patch_file), "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_bytes() == new.read_bytes()
        assert old.read_bytes() == before

    def test_dry_run_leaves_target(self, file_pair, tmp_path: Path):
        old, new = file_pair
        before = old.read_bytes()
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        result = runner.invoke(app, ["patch", str(old), str(patch_file), "--dry-run", "--color", "never"])
        assert result.exit_code == 0
        assert old.read_bytes() == before
        assert "2 succeeded, 0 failed" in result.output
        assert "Dry run" in result.output

    def test_mismatch_leaves_target(self, write_file, tmp_path: Path):
        target = write_file("t.bin", bytes([0xAA, 0x01]))
        patch_file = tmp_path / "p.patch"
        patch_file.write_text("0x00000000:de:ff\n")
        result = runner.invoke(app, ["patch", str(target), str(patch_file), "--backup", ".orig", "--color", "never"])
        assert result.exit_code == 1
        assert target.read_bytes() == bytes([0xAA, 0x01])
        assert not Path(f"{target}.orig").exists()
        assert "0 succeeded, 1 failed" in result.output

    def test_revert(self, file_pair, tmp_path: Path):
        old, new = file_pair
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        before = old.read_bytes()
        assert runner.invoke(app, ["patch", str(old), str(patch_file)]).exit_code == 0
        result = runner.invoke(app, ["patch", str(old), str(patch_file), "--revert"])
        assert result.exit_code == 0
        assert old.read_bytes() == before

    def test_length_change(self, write_file, tmp_path: Path):
        old = write_file("old.bin", b"ABCD")
        new = write_file("new.bin", b"ABCDEF")
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        assert runner.invoke(app, ["patch", str(old), str(patch_file)]).exit_code == 0
        assert old.read_bytes() == b"ABCDEF"

    def test_parse_error(self, write_file, tmp_path: Path):
        target = write_file("t.bin", b"\x00")
        patch_file = tmp_path / "bad.patch"
        patch_file.write_text("0x00000000:abc:ff\n")
        result = runner.invoke(app, ["patch", str(target), str(patch_file)])
        assert result.exit_code == 2
        assert target.read_bytes() == b"\x00"

    def test_missing_patch_file(self, write_file, tmp_path: Path):
        target = write_file("t.bin", b"\x00")
        result = runner.invoke(app, ["patch", str(target), str(tmp_path / "none.patch")])
        assert result.exit_code == 2

    def test_backup_suffix_from_config(self, file_pair, tmp_path: Path):
        old, new = file_pair
        before = old.read_bytes()
        (tmp_path / ".binfiddle.toml").write_text('[patch]\nbackup_suffix = ".bak"\n')
        patch_file = _make_patch(old, new, tmp_path / "p.patch")
        assert runner.invoke(app, ["patch", str(old), str(patch_file)]).exit_code == 0
        assert Path(f"{old}.bak").read_bytes() == before
