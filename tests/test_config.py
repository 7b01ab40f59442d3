"""Tests for sidecar.config."""

from __future__ import annotations

from pathlib import Path

import pytest

import sidecar.config as config_mod
from sidecar.config import DEFAULT_CONFIG, _deep_merge, load_config


@pytest.fixture(autouse=True)
def _no_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Never pick up a real ~/.config/sidecar/config.toml
    monkeypatch.setattr(config_mod, "_DEFAULT_PATH", tmp_path / "absent" / "config.toml")


class TestLoadConfigDefaults:
    def test_defaults_returned_when_no_file(self) -> None:
        cfg = load_config()
        assert cfg["log_file"] == ""
        assert cfg["log_level"] == "INFO"
        assert cfg["sources"]["proc_root"] == "/proc"
        assert cfg["sources"]["sysfs_root"] == "/sys/class/power_supply"

    def test_all_default_keys_present(self) -> None:
        cfg = load_config()
        assert set(cfg.keys()) == set(DEFAULT_CONFIG.keys())

    def test_defaults_not_shared(self) -> None:
        cfg = load_config()
        cfg["log_level"] = "DEBUG"
        assert DEFAULT_CONFIG["log_level"] == "INFO"


class TestTomlOverlay:
    @pytest.fixture
    def toml_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        path = tmp_path / "config.toml"
        monkeypatch.setattr(config_mod, "_DEFAULT_PATH", path)
        return path

    def test_overrides_source_root(self, toml_file: Path) -> None:
        toml_file.write_text('[sources]\nproc_root = "/host/proc"\n')
        cfg = load_config()
        assert cfg["sources"]["proc_root"] == "/host/proc"
        # Sibling keys keep their defaults
        assert cfg["sources"]["sysfs_root"] == "/sys/class/power_supply"

    def test_overrides_scalar(self, toml_file: Path) -> None:
        toml_file.write_text('log_file = "/tmp/sidecar.log"\nlog_level = "DEBUG"\n')
        cfg = load_config()
        assert cfg["log_file"] == "/tmp/sidecar.log"
        assert cfg["log_level"] == "DEBUG"


class TestDefaultLocation:
    def test_default_location_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        cfg_file = tmp_path / "config.toml"
        cfg_file.write_text('log_level = "WARNING"\n')
        monkeypatch.setattr(config_mod, "_DEFAULT_PATH", cfg_file)
        assert load_config()["log_level"] == "WARNING"

    def test_invalid_default_location_warns(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        cfg_file = tmp_path / "config.toml"
        cfg_file.write_text("this is [not valid toml\n")
        monkeypatch.setattr(config_mod, "_DEFAULT_PATH", cfg_file)
        cfg = load_config()
        assert cfg["log_level"] == "INFO"
        assert "ignoring invalid TOML" in capsys.readouterr().err


class TestDeepMerge:
    def test_scalar_overwrite(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"a": 10}) == {"a": 10, "b": 2}

    def test_nested_dict_merge(self) -> None:
        result = _deep_merge({"x": {"a": 1, "b": 2}}, {"x": {"b": 3, "c": 4}})
        assert result["x"] == {"a": 1, "b": 3, "c": 4}
