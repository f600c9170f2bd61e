"""Passage text clean-up and the immutable reference text used by sessions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_DOUBLE_QUOTES = re.compile("[“”]")
_SINGLE_QUOTES = re.compile("[‘’]")
_WHITESPACE = re.compile(r"\s+")


class InvalidConfiguration(ValueError):
    """Raised when a typing session cannot be created from the given input."""


def convert_to_straight_quotes(text: str) -> str:
    """Replace curly quotes with their plain ASCII counterparts."""
    return _SINGLE_QUOTES.sub("'", _DOUBLE_QUOTES.sub('"', text))


def fix_nukta(text: str) -> str:
    """Decompose precomposed Devanagari nukta letters so they can be typed."""
    return text.replace("\u095c", "\u0921\u093c").replace("\u095d", "\u0922\u093c")


def normalize_text(text: str) -> str:
    """Collapse line breaks and repeated whitespace into single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def process_text(text: str) -> str:
    """Apply every passage transformation in the order the catalog expects."""
    return normalize_text(fix_nukta(convert_to_straight_quotes(text)))


@dataclass(frozen=True)
class ReferenceText:
    """The passage a user is asked to reproduce, with its word sequence."""

    text: str
    words: Tuple[str, ...]

    @classmethod
    def from_text(cls, raw: str) -> "ReferenceText":
        text = normalize_text(raw or "")
        if not text:
            raise InvalidConfiguration("reference text must contain at least one word")
        return cls(text=text, words=tuple(text.split(" ")))

    def __len__(self) -> int:
        return len(self.words)
