"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from binfiddle.config.loader import ConfigError, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "BINFIDDLE_DIFF_FORMAT",
        "BINFIDDLE_COLOR",
        "BINFIDDLE_CONTEXT",
        "BINFIDDLE_DIFF_WIDTH",
        "BINFIDDLE_BACKUP_SUFFIX",
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.diff.format == "auto"
        assert cfg.diff.context == 3
        assert cfg.diff.width == 16
        assert cfg.output.color == "auto"
        assert cfg.patch.backup_suffix == ""

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / ".binfiddle.toml").write_text(
            'version = "1.0"\n'
            "[diff]\n"
            'format = "Unified"\n'
            "context = 8\n"
            'ignore_offsets = "0..4"\n'
            "[patch]\n"
            'backup_suffix = ".bak"\n'
            "[extra]\n"
            "unknown = 1\n"
        )
        cfg = load_config(tmp_path)
        assert cfg.diff.format == "unified"
        assert cfg.diff.context == 8
        assert cfg.diff.ignore_offsets == "0..4"
        assert cfg.patch.backup_suffix == ".bak"

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / ".binfiddle.toml").write_text("[diff]\ncolour = 'red'\nwidth = 8\n")
        assert load_config(tmp_path).diff.width == 8

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[output]\ncolor = "never"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.output.color == "never"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / ".binfiddle.toml").write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    @pytest.mark.parametrize(
        "body",
        [
            '[diff]\nformat = "fancy"\n',
            '[output]\ncolor = "sometimes"\n',
            "[diff]\nwidth = 0\n",
            "[diff]\ncontext = -1\n",
            'diff = "flat"\n',
            "[diff]\nformat = 5\n",
            "[diff]\nignore_offsets = 5\n",
            '[diff]\nsummary = "yes"\n',
            "[output]\ncolor = 1\n",
            "[output]\nsilent = 1\n",
            "[patch]\nbackup_suffix = true\n",
        ],
    )
    def test_invalid_values_raise(self, tmp_path: Path, body):
        (tmp_path / ".binfiddle.toml").write_text(body)
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_format_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BINFIDDLE_DIFF_FORMAT", "patch")
        assert load_config(tmp_path).diff.format == "patch"

    def test_color_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BINFIDDLE_COLOR", "never")
        assert load_config(tmp_path).output.color == "never"

    def test_numeric_overrides(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BINFIDDLE_CONTEXT", "0")
        monkeypatch.setenv("BINFIDDLE_DIFF_WIDTH", "32")
        cfg = load_config(tmp_path)
        assert cfg.diff.context == 0
        assert cfg.diff.width == 32

    def test_backup_suffix_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BINFIDDLE_BACKUP_SUFFIX", ".orig")
        assert load_config(tmp_path).patch.backup_suffix == ".orig"

    def test_env_beats_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".binfiddle.toml").write_text('[diff]\nformat = "simple"\n')
        monkeypatch.setenv("BINFIDDLE_DIFF_FORMAT", "unified")
        assert load_config(tmp_path).diff.format == "unified"

    def test_invalid_env_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BINFIDDLE_DIFF_FORMAT", "fancy")
        monkeypatch.setenv("BINFIDDLE_DIFF_WIDTH", "0")
        monkeypatch.setenv("BINFIDDLE_CONTEXT", "many")
        cfg = load_config(tmp_path)
        assert cfg.diff.format == "auto"
        assert cfg.diff.width == 16
        assert cfg.diff.context == 3
