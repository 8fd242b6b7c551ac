"""Configuration for askline.

Values come from a ``CascadingConfig``; anything missing or invalid falls
back to the defaults below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from askline.ask.inline_note import INLINE_NOTE_WRAP_PADDING
from askline.cascade import CascadingConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Resolved settings."""

    wrap_padding: int = INLINE_NOTE_WRAP_PADDING
    log_level: str = "INFO"
    log_dir: Path | None = None

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)

    @classmethod
    def load(
        cls,
        workspace: Path | None = None,
        home: Path | None = None,
        environ: dict[str, str] | None = None,
    ) -> Config:
        cascade = CascadingConfig(workspace=workspace, home=home, environ=environ)
        return cls.from_cascade(cascade)

    @classmethod
    def from_cascade(cls, cascade: CascadingConfig) -> Config:
        log_dir = cascade.get("logging.dir")
        return cls(
            wrap_padding=cls._parse_non_negative_int(
                cascade.get("ui.wrap_padding"), INLINE_NOTE_WRAP_PADDING
            ),
            log_level=cls._parse_level(cascade.get("logging.level")),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
        )

    @staticmethod
    def _parse_non_negative_int(value: Any, default: int) -> int:
        if isinstance(value, bool):
            return default
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return default
        return parsed if parsed >= 0 else default

    @staticmethod
    def _parse_level(value: Any) -> str:
        level = str(value or "").strip().upper()
        return level if level in LOG_LEVELS else "INFO"
