"""Tests for typegauge.core.history – result persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from typegauge.core.catalog import CUSTOM_TEST_KEY
from typegauge.core.history import MAX_RECENT, ResultHistory, TestRecord
from typegauge.core.scoring import SessionSnapshot, TestResults, calculate_results


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def history_file(tmp_path: Path) -> Path:
    return tmp_path / "history.json"


@pytest.fixture()
def history(history_file: Path) -> ResultHistory:
    """ResultHistory backed by a temp file so tests don't touch ~/.typegauge."""
    return ResultHistory(history_file)


def make_results(typed=("the", "quick", "fox"), seconds=60.0, correct_keys=13, total_keys=13) -> TestResults:
    return calculate_results(
        SessionSnapshot(
            reference_words=("the", "quick", "fox"),
            typed_words=tuple(typed),
            wrong_word_indices=frozenset(),
            total_keystrokes=total_keys,
            correct_keystrokes=correct_keys,
            started_at=0.0,
            ended_at=seconds,
            time_limit_seconds=60,
        )
    )


# ---------------------------------------------------------------------------
# Fresh state
# ---------------------------------------------------------------------------

class TestFresh:
    def test_unknown_test_returns_default(self, history: ResultHistory):
        assert history.get("test1") == TestRecord()

    def test_no_recent(self, history: ResultHistory):
        assert history.recent() == []


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------

class TestRecording:
    def test_records_attempt(self, history: ResultHistory):
        assert history.record("test1", make_results()) is True
        rec = history.get("test1")
        assert rec.attempts == 1
        assert rec.best_wpm == 3
        assert rec.best_accuracy == 100.0
        assert rec.best_keystroke_accuracy == 100.0
        assert rec.qualified is False

    def test_keeps_best_values(self, history: ResultHistory):
        history.record("test1", make_results(seconds=30.0))
        history.record("test1", make_results(typed=("teh",), correct_keys=1, seconds=60.0))
        rec = history.get("test1")
        assert rec.attempts == 2
        assert rec.best_wpm == 6
        assert rec.best_accuracy == 100.0

    def test_custom_text_not_recorded(self, history: ResultHistory, history_file: Path):
        assert history.record(CUSTOM_TEST_KEY, make_results()) is False
        assert history.get(CUSTOM_TEST_KEY).attempts == 0
        assert not history_file.exists()

    def test_recent_newest_first(self, history: ResultHistory):
        history.record("test1", make_results())
        history.record("test2", make_results())
        assert [item["test"] for item in history.recent()] == ["test2", "test1"]
        assert len(history.recent(limit=1)) == 1

    def test_recent_is_bounded(self, history: ResultHistory):
        for _ in range(MAX_RECENT + 5):
            history.record("test1", make_results())
        assert len(history.recent()) == MAX_RECENT

    def test_reset(self, history: ResultHistory):
        history.record("test1", make_results())
        history.reset()
        assert history.get("test1") == TestRecord()
        assert history.recent() == []


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_written_to_disk(self, history: ResultHistory, history_file: Path):
        history.record("test1", make_results())
        data = json.loads(history_file.read_text(encoding="utf-8"))
        assert data["tests"]["test1"]["attempts"] == 1
        assert data["recent"][0]["netWPM"] == 3

    def test_reload(self, history: ResultHistory, history_file: Path):
        history.record("test1", make_results())
        reloaded = ResultHistory(history_file)
        assert reloaded.get("test1").attempts == 1
        assert len(reloaded.recent()) == 1

    def test_corrupt_file_falls_back(self, history_file: Path, caplog: pytest.LogCaptureFixture):
        history_file.write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING"):
            h = ResultHistory(history_file)
        assert h.get("test1") == TestRecord()
        assert "Could not load history" in caplog.text

    def test_ignores_malformed_recent(self, history_file: Path):
        history_file.write_text(json.dumps({"tests": {}, "recent": ["x", {"test": "t"}]}), encoding="utf-8")
        assert ResultHistory(history_file).recent() == [{"test": "t"}]
