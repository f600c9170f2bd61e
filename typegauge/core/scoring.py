from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

MIN_KEYSTROKE_ACCURACY = 85.0
MIN_QUALIFYING_SECONDS = 600
MIN_QUALIFYING_WORDS = 400

GOOD_WPM = 40
SLOW_WPM = 30
HIGH_ACCURACY = 95.0
MANY_ERROR_WORDS = 10
HIGH_ERROR_RATE = 5


@dataclass(frozen=True)
class SessionSnapshot:
    """Frozen view of a session handed to the calculator."""

    reference_words: Tuple[str, ...]
    typed_words: Tuple[str, ...]
    wrong_word_indices: FrozenSet[int]
    total_keystrokes: int
    correct_keystrokes: int
    started_at: Optional[float]
    ended_at: float
    time_limit_seconds: int


@dataclass(frozen=True)
class TestResults:
    """Final scores of a typing session.

    ``accuracy_percent`` is word-level, ``keystroke_accuracy_percent`` is
    character-level; the two are reported side by side.
    """

    __test__ = False

    net_wpm: int
    gross_wpm: int
    accuracy_percent: float
    keystroke_accuracy_percent: float
    total_words: int
    typed_word_count: int
    correct_word_count: int
    incorrect_word_count: int
    total_keystrokes_typed: int
    correct_keystrokes: int
    error_word_count: int
    elapsed_seconds: int
    total_time_seconds: int
    qualifies_for_leaderboard: bool
    original_text: str
    typed_text: str
    wrong_word_indices: Tuple[int, ...]

    @property
    def wrong_keystrokes(self) -> int:
        return max(0, self.total_keystrokes_typed - self.correct_keystrokes)

    def to_dict(self) -> Dict[str, Union[int, float, bool, str, list]]:
        """Serialise with the field names used by the results store."""
        return {
            "netWPM": self.net_wpm,
            "grossWPM": self.gross_wpm,
            "accuracyPercent": self.accuracy_percent,
            "keystrokeAccuracyPercent": self.keystroke_accuracy_percent,
            "totalWords": self.total_words,
            "typedWordCount": self.typed_word_count,
            "correctWordCount": self.correct_word_count,
            "incorrectWordCount": self.incorrect_word_count,
            "totalKeystrokesTyped": self.total_keystrokes_typed,
            "correctKeystrokes": self.correct_keystrokes,
            "wrongKeystrokes": self.wrong_keystrokes,
            "errorWordCount": self.error_word_count,
            "elapsedSeconds": self.elapsed_seconds,
            "totalTimeSeconds": self.total_time_seconds,
            "qualifiesForLeaderboard": self.qualifies_for_leaderboard,
            "originalText": self.original_text,
            "typedText": self.typed_text,
            "wrongWordIndices": list(self.wrong_word_indices),
        }


def round_half_away(value: float, places: int = 0) -> float:
    """Round with ties going away from zero (2.5 -> 3, -2.5 -> -3)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def words_per_minute(word_count: int, elapsed_seconds: float) -> int:
    if elapsed_seconds <= 0:
        return 0
    return int(round_half_away(word_count / (elapsed_seconds / 60.0)))


def percentage(part: int, whole: int) -> float:
    """``part / whole`` as a percentage rounded to 2 places, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return round_half_away(part / whole * 100.0, 2)


def count_correct_words(reference_words: Sequence[str], typed_words: Sequence[str]) -> int:
    return sum(
        1
        for index, word in enumerate(typed_words)
        if index < len(reference_words) and word == reference_words[index]
    )


def elapsed_seconds(snapshot: SessionSnapshot) -> float:
    """Scoring denominator in seconds.

    Sessions that never started are scored over the full time limit; any
    started session counts at least one second.
    """
    if snapshot.started_at is None:
        return float(snapshot.time_limit_seconds)
    return max(snapshot.ended_at - snapshot.started_at, 1.0)


def qualifies_for_leaderboard(
    keystroke_accuracy: float,
    elapsed: float,
    typed_word_count: int,
) -> bool:
    if keystroke_accuracy < MIN_KEYSTROKE_ACCURACY:
        return False
    return elapsed >= MIN_QUALIFYING_SECONDS or typed_word_count >= MIN_QUALIFYING_WORDS


def calculate_results(snapshot: SessionSnapshot) -> TestResults:
    """Derive every reported metric from a finished session."""
    elapsed = elapsed_seconds(snapshot)
    typed_count = len(snapshot.typed_words)
    correct_words = count_correct_words(snapshot.reference_words, snapshot.typed_words)
    keystroke_accuracy = percentage(snapshot.correct_keystrokes, snapshot.total_keystrokes)

    return TestResults(
        net_wpm=words_per_minute(correct_words, elapsed),
        gross_wpm=words_per_minute(typed_count, elapsed),
        accuracy_percent=percentage(correct_words, typed_count),
        keystroke_accuracy_percent=keystroke_accuracy,
        total_words=len(snapshot.reference_words),
        typed_word_count=typed_count,
        correct_word_count=correct_words,
        incorrect_word_count=typed_count - correct_words,
        total_keystrokes_typed=snapshot.total_keystrokes,
        correct_keystrokes=snapshot.correct_keystrokes,
        error_word_count=len(snapshot.wrong_word_indices),
        elapsed_seconds=int(round_half_away(elapsed)),
        total_time_seconds=snapshot.time_limit_seconds,
        qualifies_for_leaderboard=qualifies_for_leaderboard(keystroke_accuracy, elapsed, typed_count),
        original_text=" ".join(snapshot.reference_words),
        typed_text=" ".join(snapshot.typed_words),
        wrong_word_indices=tuple(sorted(snapshot.wrong_word_indices)),
    )


@dataclass(frozen=True)
class PerformanceInsights:
    """Feedback shown under the results: speed analysis and recommendations."""

    analysis: Tuple[str, ...]
    recommendations: Tuple[str, ...]


def error_rate_percent(results: TestResults) -> int:
    """Wrong words per passage character, as a whole percentage."""
    total_chars = len(results.original_text)
    if total_chars <= 0:
        return 0
    return int(round_half_away(results.error_word_count / total_chars * 100.0))


def performance_insights(results: TestResults) -> PerformanceInsights:
    analysis: List[str] = []
    if results.net_wpm >= GOOD_WPM:
        analysis.append("Good typing speed achieved!")
    else:
        analysis.append("Practice more to improve speed")
    if results.accuracy_percent >= HIGH_ACCURACY:
        analysis.append("Excellent text accuracy!")
    if results.keystroke_accuracy_percent >= HIGH_ACCURACY:
        analysis.append("Outstanding keystroke precision!")
    if results.accuracy_percent < HIGH_ACCURACY:
        analysis.append("Focus on accuracy improvement")

    recommendations: List[str] = []
    if results.error_word_count > MANY_ERROR_WORDS:
        recommendations.append("Practice with error highlighting enabled")
    if error_rate_percent(results) > HIGH_ERROR_RATE:
        recommendations.append("Slow down and focus on accuracy first")
    if results.net_wpm < SLOW_WPM:
        recommendations.append("Focus on finger placement and posture")
    recommendations.append("Regular practice improves muscle memory")
    recommendations.append("Try different difficulty levels")
    return PerformanceInsights(analysis=tuple(analysis), recommendations=tuple(recommendations))
