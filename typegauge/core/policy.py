"""Backspace policies consulted before the typed buffer is allowed to shrink."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

DELETION_KEYS = frozenset({"Backspace", "Delete"})


class BackspaceMode(str, Enum):
    FULL = "full"
    WORD = "word"
    DISABLED = "disabled"


def is_deletion_key(key: str) -> bool:
    return key in DELETION_KEYS


def word_start_offset(committed_words: Sequence[str]) -> int:
    """Offset of the current word in the full input text.

    Every committed word is followed by exactly one delimiter, so the
    current word begins right after the last of them.
    """
    return sum(len(word) + 1 for word in committed_words)


def deletion_allowed(
    mode: BackspaceMode,
    current_buffer: str,
    attempted_buffer: str,
    committed_words: Sequence[str],
) -> bool:
    """Return True if shrinking ``current_buffer`` to ``attempted_buffer`` is permitted.

    Both buffers are the host's full input text: the committed words, each
    followed by a space, then the in-progress word. The check has no side
    effects.
    """
    if mode is BackspaceMode.FULL:
        return True
    if mode is BackspaceMode.DISABLED:
        return False
    return len(attempted_buffer) >= word_start_offset(committed_words)
