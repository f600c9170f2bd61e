"""Display state for the passage view."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from typegauge.core.policy import BackspaceMode
from typegauge.core.session import TypingSession


class WordStatus(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    CURRENT = "current"
    PENDING = "pending"
    PLAIN = "plain"


@dataclass
class WordView:
    """One reference word and how the passage view should paint it."""

    index: int
    text: str
    status: WordStatus


def build_word_views(
    session: TypingSession,
    highlight_text: bool = True,
    show_errors: bool = True,
) -> List[WordView]:
    """Classify every reference word for rendering.

    Committed words are correct/wrong when errors are shown and plain
    otherwise; the current word is highlighted only while the session runs.
    """
    typed = session.typed_words
    views: List[WordView] = []
    for index, word in enumerate(session.reference_words):
        if index < session.current_word_index:
            if not show_errors:
                status = WordStatus.PLAIN
            elif index < len(typed) and typed[index] == word:
                status = WordStatus.CORRECT
            else:
                status = WordStatus.WRONG
        elif index == session.current_word_index:
            status = WordStatus.CURRENT if highlight_text and session.is_running else WordStatus.PLAIN
        else:
            status = WordStatus.PENDING
        views.append(WordView(index=index, text=word, status=status))
    return views


def needs_new_session(session: Optional[TypingSession], backspace_mode: BackspaceMode) -> bool:
    """Whether switching to ``backspace_mode`` has to discard ``session``.

    Display toggles never do; the backspace mode is fixed per session.
    """
    return session is None or session.backspace_mode is not backspace_mode
