"""Tests for the configuration cascade."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from askline.cascade import CascadingConfig, ConfigLayer
from askline.config import Config


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def dirs(tmp_path):
    home = tmp_path / "home"
    workspace = tmp_path / "project"
    home.mkdir()
    workspace.mkdir()
    return home, workspace


class TestConfigLayer:
    def test_missing_file_is_empty(self, tmp_path):
        layer = ConfigLayer.from_file(tmp_path / "nope.toml")
        assert layer.data == {}
        assert layer.source == "file"

    def test_dotted_get(self, tmp_path):
        path = tmp_path / "config.toml"
        _write(path, "[ui]\nwrap_padding = 3\n")
        layer = ConfigLayer.from_file(path)
        assert layer.get("ui.wrap_padding") == 3
        assert layer.get("ui.missing", "x") == "x"
        assert layer.get("ui.wrap_padding.deeper") is None

    def test_invalid_toml_is_skipped(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        _write(path, "[ui\nwrap_padding = ")
        with caplog.at_level(logging.WARNING, logger="askline"):
            layer = ConfigLayer.from_file(path)
        assert layer.data == {}
        assert any(r.getMessage() == "config_load_failed" for r in caplog.records)

    def test_env_layer(self):
        layer = ConfigLayer.from_env({"ASKLINE_LOG_LEVEL": "debug", "ASKLINE_WRAP_PADDING": "", "OTHER": "1"})
        assert layer.data == {"logging": {"level": "debug"}}
        assert layer.source == "env"


class TestCascadingConfig:
    def test_priority_order(self, dirs):
        home, workspace = dirs
        _write(home / ".askline" / "config.toml", "[ui]\nwrap_padding = 1\n[logging]\nlevel = 'ERROR'\n")
        _write(workspace / ".askline" / "config.toml", "[ui]\nwrap_padding = 3\n")
        _write(workspace / ".askline" / "config.local.toml", "[ui]\nwrap_padding = 4\n")

        cascade = CascadingConfig(workspace=workspace, home=home, environ={})
        assert cascade.get("ui.wrap_padding") == 4
        assert cascade.get("logging.level") == "ERROR"

        cascade = CascadingConfig(workspace=workspace, home=home, environ={"ASKLINE_WRAP_PADDING": "6"})
        assert cascade.get("ui.wrap_padding") == "6"
        assert cascade.get_sources("ui.wrap_padding") == [
            "environment (env)",
            "config.local (file)",
            "config (file)",
            "config (file)",
        ]

    def test_without_workspace_only_home_and_env(self, dirs):
        home, workspace = dirs
        _write(workspace / ".askline" / "config.toml", "[ui]\nwrap_padding = 3\n")
        cascade = CascadingConfig(home=home, environ={})
        assert cascade.get("ui.wrap_padding") is None
        assert [layer.source for layer in cascade.layers] == ["file", "env"]

    def test_reload(self, dirs):
        home, workspace = dirs
        cascade = CascadingConfig(workspace=workspace, home=home, environ={})
        assert cascade.get("ui.wrap_padding") is None
        _write(workspace / ".askline" / "config.toml", "[ui]\nwrap_padding = 5\n")
        cascade.reload()
        assert cascade.get("ui.wrap_padding") == 5


class TestConfig:
    def test_defaults(self, dirs):
        home, workspace = dirs
        config = Config.load(workspace=workspace, home=home, environ={})
        assert config == Config()
        assert config.wrap_padding == 2
        assert config.logging_level == logging.INFO

    def test_values_from_files_and_env(self, dirs, tmp_path):
        home, workspace = dirs
        _write(workspace / ".askline" / "config.toml", "[ui]\nwrap_padding = 0\n[logging]\nlevel = 'debug'\n")
        config = Config.load(
            workspace=workspace,
            home=home,
            environ={"ASKLINE_LOG_DIR": str(tmp_path / "logs")},
        )
        assert config.wrap_padding == 0
        assert config.log_level == "DEBUG"
        assert config.logging_level == logging.DEBUG
        assert config.log_dir == tmp_path / "logs"

    @pytest.mark.parametrize("value", ["-1", "abc", "true", "'wide'"])
    def test_invalid_padding_falls_back(self, dirs, value):
        home, workspace = dirs
        _write(workspace / ".askline" / "config.toml", f"[ui]\nwrap_padding = {value}\n")
        config = Config.load(workspace=workspace, home=home, environ={})
        assert config.wrap_padding == 2

    def test_env_padding_is_parsed(self, dirs):
        home, workspace = dirs
        config = Config.load(workspace=workspace, home=home, environ={"ASKLINE_WRAP_PADDING": "7"})
        assert config.wrap_padding == 7

    def test_unknown_level_falls_back(self, dirs):
        home, workspace = dirs
        config = Config.load(workspace=workspace, home=home, environ={"ASKLINE_LOG_LEVEL": "LOUD"})
        assert config.log_level == "INFO"
