from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from typegauge.core.text import process_text

CUSTOM_TEST_KEY = "custom-text"
CUSTOM_CATEGORY = "Custom Text"
MIN_CUSTOM_WORDS = 10
DEFAULT_TIME_LIMIT = 60


@dataclass(frozen=True)
class TypingTest:
    key: str
    title: str
    content: str
    language: str = "english"
    category: str = "General"
    time_limit: int = DEFAULT_TIME_LIMIT

    @property
    def is_custom(self) -> bool:
        return self.key == CUSTOM_TEST_KEY

    @property
    def word_count(self) -> int:
        return len(self.content.split(" "))


def custom_test(text: str, time_limit: int = DEFAULT_TIME_LIMIT, language: str = "english") -> TypingTest:
    """Build an ad-hoc test from user supplied text."""
    content = process_text(text or "")
    if not content:
        raise ValueError("Please enter some text to practice with.")
    words = content.split(" ")
    if len(words) < MIN_CUSTOM_WORDS:
        raise ValueError(f"Please enter at least {MIN_CUSTOM_WORDS} words to practice with.")
    if time_limit <= 0:
        raise ValueError(f"time limit must be positive, got {time_limit}")
    title = " ".join(words[:5])
    if len(title) > 50:
        title = title[:47] + "..."
    return TypingTest(
        key=CUSTOM_TEST_KEY,
        title=title,
        content=content,
        language=language,
        category=CUSTOM_CATEGORY,
        time_limit=time_limit,
    )


class TypingTestCatalog:
    """Practice passages bundled as ``data/tests/test*.yaml`` files."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "tests"
        self._tests = self._load_tests()

    def all(self) -> List[TypingTest]:
        return list(self._tests.values())

    def get(self, key: str) -> TypingTest:
        return self._tests[key]

    def languages(self) -> List[str]:
        seen: Dict[str, None] = {}
        for test in self._tests.values():
            seen.setdefault(test.language, None)
        return list(seen)

    def by_language(self, language: str) -> List[TypingTest]:
        return [test for test in self._tests.values() if test.language == language]

    def categories(self, language: str) -> Dict[str, List[TypingTest]]:
        """Tests of one language grouped by category, in catalog order."""
        grouped: Dict[str, List[TypingTest]] = {}
        for test in self.by_language(language):
            grouped.setdefault(test.category, []).append(test)
        return grouped

    def _load_tests(self) -> Dict[str, TypingTest]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Tests directory not found: {base_dir}")

        tests: Dict[str, TypingTest] = {}

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^test(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for test_path in sorted(base_dir.glob("test*.yaml"), key=_sort_key):
            key = test_path.stem
            raw = yaml.safe_load(test_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{test_path.name}: expected YAML with 'title' and 'content'")
            title = raw.get("title")
            content = raw.get("content")
            if not title or not isinstance(title, str):
                raise ValueError(f"{test_path.name}: missing or invalid 'title'")
            if content is None:
                raise ValueError(f"{test_path.name}: missing 'content'")
            # content may be a list of paragraphs or one multiline string
            if isinstance(content, list):
                content = " ".join(str(item) for item in content)
            text = process_text(str(content))
            if not text:
                raise ValueError(f"{test_path.name}: 'content' is empty")
            time_limit = raw.get("time_limit", DEFAULT_TIME_LIMIT)
            if isinstance(time_limit, bool) or not isinstance(time_limit, int) or time_limit <= 0:
                raise ValueError(f"{test_path.name}: 'time_limit' must be a positive integer")
            tests[key] = TypingTest(
                key=key,
                title=title.strip(),
                content=text,
                language=str(raw.get("language", "english")).strip().lower(),
                category=str(raw.get("category", "General")).strip(),
                time_limit=time_limit,
            )

        if not tests:
            raise ValueError(f"No test files (test*.yaml) found in {base_dir}")
        return tests
