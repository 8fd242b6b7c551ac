"""Cascading configuration for askline.

Configuration priority (highest first):
1. Environment variables
2. .askline/config.local.toml (git-ignored, per-machine overrides)
3. .askline/config.toml (project-specific)
4. ~/.askline/config.toml (user defaults)
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger("askline.config")

# env var -> dotted config key
ENV_KEYS = {
    "ASKLINE_WRAP_PADDING": "ui.wrap_padding",
    "ASKLINE_LOG_LEVEL": "logging.level",
    "ASKLINE_LOG_DIR": "logging.dir",
}


def _lookup(data: dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = data
    for part in key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(part)
        if current is None:
            return default
    return current


@dataclass
class ConfigLayer:
    """A single layer in the configuration cascade."""

    name: str
    path: Path | None
    data: dict[str, Any] = field(default_factory=dict)
    source: str = ""

    @classmethod
    def from_file(cls, path: Path) -> ConfigLayer:
        """Load a config layer from a TOML file. Unreadable files yield an empty layer."""
        if not path.exists():
            return cls(name=path.stem, path=path, data={}, source="file")

        try:
            data = tomllib.loads(path.read_bytes().decode())
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            logger.warning("config_load_failed", extra={"data": {"path": str(path), "error": str(e)}})
            data = {}
        return cls(name=path.stem, path=path, data=data, source="file")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ConfigLayer:
        """Load config from ASKLINE_* environment variables."""
        environ = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for var, key in ENV_KEYS.items():
            value = environ.get(var)
            if not value:
                continue
            section, _, name = key.partition(".")
            data.setdefault(section, {})[name] = value
        return cls(name="environment", path=None, data=data, source="env")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a nested value using dot notation."""
        return _lookup(self.data, key, default)


class CascadingConfig:
    """Manages multiple configuration layers with proper override behavior."""

    def __init__(
        self,
        workspace: Path | None = None,
        home: Path | None = None,
        environ: dict[str, str] | None = None,
    ):
        self.workspace = workspace
        self.home = home or Path.home()
        self.environ = environ
        self.layers: list[ConfigLayer] = []
        self._merged: dict[str, Any] = {}
        self._load_layers()

    def _load_layers(self):
        """Load all config layers in priority order (lowest first)."""
        self.layers = [ConfigLayer.from_file(self.home / ".askline" / "config.toml")]

        if self.workspace:
            project_dir = self.workspace / ".askline"
            self.layers.append(ConfigLayer.from_file(project_dir / "config.toml"))
            self.layers.append(ConfigLayer.from_file(project_dir / "config.local.toml"))

        self.layers.append(ConfigLayer.from_env(self.environ))

        merged: dict[str, Any] = {}
        for layer in self.layers:
            self._deep_merge(merged, layer.data)
        self._merged = merged

    @staticmethod
    def _deep_merge(base: dict, updates: dict):
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                CascadingConfig._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value using dot notation."""
        return _lookup(self._merged, key, default)

    def get_sources(self, key: str) -> list[str]:
        """Find which config layers contributed to a key."""
        return [
            f"{layer.name} ({layer.source})"
            for layer in reversed(self.layers)
            if layer.get(key) is not None
        ]

    def reload(self):
        self._load_layers()
