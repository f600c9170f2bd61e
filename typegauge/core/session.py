from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Set, Tuple

from typegauge.core.policy import BackspaceMode, deletion_allowed, is_deletion_key
from typegauge.core.scoring import (
    SessionSnapshot,
    TestResults,
    calculate_results,
    count_correct_words,
    round_half_away,
    words_per_minute,
)
from typegauge.core.text import InvalidConfiguration, ReferenceText

logger = logging.getLogger(__name__)

DELIMITER = " "
NAVIGATION_KEYS = frozenset(
    {
        "Tab",
        "Escape",
        "ArrowLeft",
        "ArrowRight",
        "ArrowUp",
        "ArrowDown",
        "Home",
        "End",
        "PageUp",
        "PageDown",
        "Shift",
        "Control",
        "Alt",
        "Meta",
        "CapsLock",
    }
)
# Ctrl/Cmd chords that would copy, paste, undo or leave the page mid-test.
BLOCKED_SHORTCUTS = frozenset("cvxaurfspzy")


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class TypingSession:
    """Keystroke-driven state machine for one timed typing attempt.

    The session moves ``IDLE -> RUNNING -> FINISHED``. It starts on the first
    counted keystroke and finishes when the timer runs out, when the final
    word is typed exactly, or on :meth:`submit`. Events arriving after the
    session finished are ignored.

    Hosts feed two kinds of input: :meth:`on_key_event` for every physical
    key press (before the text field changes) and :meth:`on_buffer_change`
    with the new contents of the current-word field.
    """

    def __init__(
        self,
        reference_text: str,
        time_limit_seconds: int,
        backspace_mode: BackspaceMode = BackspaceMode.FULL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(time_limit_seconds, bool) or not isinstance(time_limit_seconds, int):
            raise InvalidConfiguration(f"time limit must be an integer, got {time_limit_seconds!r}")
        if time_limit_seconds <= 0:
            raise InvalidConfiguration(f"time limit must be positive, got {time_limit_seconds}")
        self._reference = ReferenceText.from_text(reference_text)
        self._time_limit = time_limit_seconds
        self._backspace_mode = BackspaceMode(backspace_mode)
        self._clock = clock

        self._state = SessionState.IDLE
        self._index = 0
        self._typed_words: List[str] = []
        self._buffer = ""
        self._wrong_words: Set[int] = set()
        self._total_keystrokes = 0
        self._correct_keystrokes = 0
        self._remaining = time_limit_seconds
        self._started_at: Optional[float] = None
        self._ended_at: Optional[float] = None
        self._results: Optional[TestResults] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """True between the first key press and the end of the session."""
        return self._state is SessionState.RUNNING

    @property
    def is_finished(self) -> bool:
        """True once the session has ended and results are final."""
        return self._state is SessionState.FINISHED

    @property
    def reference(self) -> ReferenceText:
        """The tokenized passage being typed."""
        return self._reference

    @property
    def reference_words(self) -> Tuple[str, ...]:
        """Words of the passage, in order."""
        return self._reference.words

    @property
    def current_word_index(self) -> int:
        """Index of the word being typed; equals the committed word count."""
        return self._index

    @property
    def current_word(self) -> str:
        """The reference word the user is currently expected to type."""
        return self._reference.words[self._index]

    @property
    def typed_words(self) -> Tuple[str, ...]:
        """Words committed so far, as typed."""
        return tuple(self._typed_words)

    @property
    def current_buffer(self) -> str:
        """Text typed for the current word, not yet committed."""
        return self._buffer

    @property
    def wrong_word_indices(self) -> FrozenSet[int]:
        """Indices of words committed with a mismatch."""
        return frozenset(self._wrong_words)

    @property
    def total_keystrokes(self) -> int:
        """Character keys counted toward keystroke accuracy."""
        return self._total_keystrokes

    @property
    def correct_keystrokes(self) -> int:
        """Counted keys that matched the reference character."""
        return self._correct_keystrokes

    @property
    def started_at(self) -> Optional[float]:
        """Clock reading at the first key press, None while idle."""
        return self._started_at

    @property
    def ended_at(self) -> Optional[float]:
        """Clock reading when the session finished."""
        return self._ended_at

    @property
    def time_limit_seconds(self) -> int:
        """Countdown length the session was created with."""
        return self._time_limit

    @property
    def backspace_mode(self) -> BackspaceMode:
        """Deletion policy, fixed for the life of the session."""
        return self._backspace_mode

    @property
    def results(self) -> Optional[TestResults]:
        """Final scores, available once the session has finished."""
        return self._results

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------

    def on_key_event(self, key: str, ctrl: bool = False) -> bool:
        """Register a key press before the host applies it.

        Returns True if the host may apply the key's default effect, False
        if the key must be suppressed.
        """
        if self._state is SessionState.FINISHED:
            return False
        if ctrl:
            if self._state is SessionState.RUNNING and key.lower() in BLOCKED_SHORTCUTS:
                return False
            return True
        if key in NAVIGATION_KEYS:
            return True

        if self._state is SessionState.IDLE:
            self._start()
        self._total_keystrokes += 1

        if is_deletion_key(key):
            current = self._input_text(self._buffer)
            if not deletion_allowed(self._backspace_mode, current, current[:-1], self._typed_words):
                logger.debug("Deletion blocked by %s backspace mode", self._backspace_mode.value)
                return False
            return True
        if key == DELIMITER:
            self._commit_current_word()
            return False
        return True

    def on_buffer_change(self, value: str) -> bool:
        """Apply a new value of the current-word field.

        Returns False (leaving the session unchanged) when the edit is
        rejected by the backspace policy or carries a delimiter.
        """
        if self._state is SessionState.FINISHED:
            return False
        if any(ch.isspace() for ch in value):
            return False
        if len(value) < len(self._buffer) and not deletion_allowed(
            self._backspace_mode,
            self._input_text(self._buffer),
            self._input_text(value),
            self._typed_words,
        ):
            logger.debug("Buffer shrink rejected by %s backspace mode", self._backspace_mode.value)
            return False
        if value == self._buffer:
            return True

        if self._state is SessionState.IDLE:
            self._start()
        self._buffer = value
        self._recompute_correct_keystrokes()

        expected = self.current_word
        if value and value != expected[: len(value)]:
            self._wrong_words.add(self._index)

        if self._index == len(self._reference.words) - 1 and value == expected:
            self._complete()
        return True

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self._state is SessionState.FINISHED:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._complete()

    def submit(self) -> TestResults:
        """Finish the session early and return its results."""
        self._complete()
        return self._results

    def retry(self) -> "TypingSession":
        """Return a fresh, idle session with the same configuration."""
        return TypingSession(
            self._reference.text,
            self._time_limit,
            self._backspace_mode,
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Live queries
    # ------------------------------------------------------------------

    def current_progress_percent(self) -> float:
        """Share of the passage typed so far (0-100), counting the partial current word."""
        total = len(self._reference.words)
        if len(self._typed_words) >= total:
            return 100.0
        word_length = len(self.current_word) or 1
        partial = min(len(self._buffer) / word_length, 1.0)
        return round_half_away((self._index + partial) / total * 100.0, 2)

    def current_wpm(self) -> int:
        """Live net WPM from correct words over the time elapsed."""
        if self._started_at is None:
            return 0
        end = self._ended_at if self._ended_at is not None else self._clock()
        correct = count_correct_words(self._reference.words, self._typed_words)
        return words_per_minute(correct, max(end - self._started_at, 1.0))

    def remaining_seconds(self) -> int:
        """Seconds left on the countdown."""
        return self._remaining

    def snapshot(self) -> SessionSnapshot:
        """Freeze the counters for scoring."""
        return SessionSnapshot(
            reference_words=self._reference.words,
            typed_words=tuple(self._typed_words),
            wrong_word_indices=frozenset(self._wrong_words),
            total_keystrokes=self._total_keystrokes,
            correct_keystrokes=self._correct_keystrokes,
            started_at=self._started_at,
            ended_at=self._ended_at if self._ended_at is not None else self._clock(),
            time_limit_seconds=self._time_limit,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start(self) -> None:
        self._state = SessionState.RUNNING
        self._started_at = self._clock()
        logger.info(
            "Typing session started: %d words, %ds limit, backspace=%s",
            len(self._reference.words),
            self._time_limit,
            self._backspace_mode.value,
        )

    def _input_text(self, buffer: str) -> str:
        return "".join(word + DELIMITER for word in self._typed_words) + buffer

    def _commit_current_word(self) -> None:
        word = self._buffer
        self._typed_words.append(word)
        if word != self.current_word:
            self._wrong_words.add(self._index)

        if self._index == len(self._reference.words) - 1:
            self._recompute_correct_keystrokes(include_buffer=False)
            self._complete()
            return
        self._index += 1
        self._buffer = ""
        self._recompute_correct_keystrokes()

    def _recompute_correct_keystrokes(self, include_buffer: bool = True) -> None:
        words = self._reference.words
        correct = sum(
            len(word) + 1
            for index, word in enumerate(self._typed_words)
            if word == words[index]
        )
        if include_buffer:
            correct += sum(1 for a, b in zip(self._buffer, words[self._index]) if a == b)
        self._correct_keystrokes = correct

    def _complete(self) -> None:
        if self._state is SessionState.FINISHED:
            return
        self._ended_at = self._clock()
        if self._buffer and len(self._typed_words) <= self._index:
            self._typed_words.append(self._buffer)
        self._state = SessionState.FINISHED
        self._results = calculate_results(self.snapshot())
        logger.info(
            "Typing session finished: %d net WPM, %.2f%% accuracy, %.2f%% keystroke accuracy",
            self._results.net_wpm,
            self._results.accuracy_percent,
            self._results.keystroke_accuracy_percent,
        )
