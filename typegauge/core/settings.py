from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from typegauge.core.policy import BackspaceMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PracticeSettings:
    """User preferences applied when a new session is created.

    ``time_limit`` of None means the selected test's own limit is used.
    """

    highlight_text: bool = True
    show_errors: bool = True
    backspace_mode: BackspaceMode = BackspaceMode.FULL
    time_limit: Optional[int] = None
    language: str = "english"

    def effective_time_limit(self, test_time_limit: int) -> int:
        return self.time_limit if self.time_limit is not None else test_time_limit

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PracticeSettings":
        defaults = cls()
        mode = raw.get("backspace_mode", defaults.backspace_mode.value)
        try:
            backspace_mode = BackspaceMode(mode)
        except ValueError:
            raise ValueError(f"unknown backspace mode: {mode!r}") from None
        time_limit = raw.get("time_limit")
        if time_limit is not None:
            if isinstance(time_limit, bool) or not isinstance(time_limit, int) or time_limit <= 0:
                raise ValueError(f"'time_limit' must be a positive integer, got {time_limit!r}")
        return cls(
            highlight_text=bool(raw.get("highlight_text", defaults.highlight_text)),
            show_errors=bool(raw.get("show_errors", defaults.show_errors)),
            backspace_mode=backspace_mode,
            time_limit=time_limit,
            language=str(raw.get("language", defaults.language)).strip().lower(),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "highlight_text": self.highlight_text,
            "show_errors": self.show_errors,
            "backspace_mode": self.backspace_mode.value,
            "time_limit": self.time_limit,
            "language": self.language,
        }


class SettingsStore:
    """Loads and saves PracticeSettings as YAML. File: ~/.typegauge/settings.yaml."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".typegauge" / "settings.yaml"
        self._settings = self._load()

    @property
    def settings(self) -> PracticeSettings:
        return self._settings

    def update(self, **changes: Any) -> PracticeSettings:
        self._settings = replace(self._settings, **changes)
        self._save()
        return self._settings

    def _load(self) -> PracticeSettings:
        if not self._file_path.exists():
            return PracticeSettings()
        try:
            raw = yaml.safe_load(self._file_path.read_text(encoding="utf-8")) or {}
            if not isinstance(raw, dict):
                raise ValueError("expected a mapping")
            return PracticeSettings.from_mapping(raw)
        except (yaml.YAMLError, OSError, ValueError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return PracticeSettings()

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                yaml.safe_dump(self._settings.to_mapping(), sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)
