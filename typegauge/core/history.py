from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from typegauge.core.catalog import CUSTOM_TEST_KEY
from typegauge.core.scoring import TestResults

logger = logging.getLogger(__name__)

MAX_RECENT = 50


@dataclass
class TestRecord:
    __test__ = False

    attempts: int = 0
    best_wpm: int = 0
    best_accuracy: float = 0.0
    best_keystroke_accuracy: float = 0.0
    qualified: bool = False


class ResultHistory:
    """Per-test bests and the most recent results, kept across app restarts.
    File: ~/.typegauge/history.json."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".typegauge" / "history.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._records, self._recent = self._load()

    def get(self, test_key: str) -> TestRecord:
        return self._records.get(test_key, TestRecord())

    def recent(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent results first."""
        items = list(reversed(self._recent))
        return items[:limit] if limit is not None else items

    def record(self, test_key: str, results: TestResults) -> bool:
        """Store a finished result. Custom-text results are not kept."""
        if test_key == CUSTOM_TEST_KEY:
            logger.info("Results for custom text are not saved to history")
            return False
        current = self._records.get(test_key, TestRecord())
        current.attempts += 1
        current.best_wpm = max(current.best_wpm, results.net_wpm)
        current.best_accuracy = max(current.best_accuracy, results.accuracy_percent)
        current.best_keystroke_accuracy = max(
            current.best_keystroke_accuracy, results.keystroke_accuracy_percent
        )
        current.qualified = current.qualified or results.qualifies_for_leaderboard
        self._records[test_key] = current

        entry = {"test": test_key, **results.to_dict()}
        self._recent.append(entry)
        del self._recent[:-MAX_RECENT]
        self._save()
        return True

    def reset(self) -> None:
        self._records = {}
        self._recent = []
        self._save()

    def _load(self) -> Tuple[Dict[str, TestRecord], List[Dict[str, Any]]]:
        records: Dict[str, TestRecord] = {}
        recent: List[Dict[str, Any]] = []
        if not self._file_path.exists():
            return records, recent
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load history from %s: %s", self._file_path, e)
            return records, recent

        for key, value in payload.get("tests", {}).items():
            records[key] = TestRecord(
                attempts=int(value.get("attempts", 0)),
                best_wpm=int(value.get("best_wpm", 0)),
                best_accuracy=float(value.get("best_accuracy", 0.0)),
                best_keystroke_accuracy=float(value.get("best_keystroke_accuracy", 0.0)),
                qualified=bool(value.get("qualified", False)),
            )
        items = payload.get("recent", [])
        if isinstance(items, list):
            recent = [item for item in items if isinstance(item, dict)][-MAX_RECENT:]
        return records, recent

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "tests": {key: asdict(value) for key, value in self._records.items()},
            "recent": self._recent,
        }
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save history to %s: %s", self._file_path, e)
