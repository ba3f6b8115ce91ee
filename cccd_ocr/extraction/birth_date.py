"""Date of birth extraction.

Cards print the date of birth as DD/MM/YYYY after a "Ngày sinh" /
"Date of birth" label. Other dates on the card (issue, expiry) are
filtered out by the plausible birth-year window.
"""

import re
from collections.abc import Iterator

from .base import (
    GLOBAL_FALLBACK,
    KEYWORD_GLOBAL,
    KEYWORD_LINE,
    FieldRule,
    RecognizedText,
    Strategy,
    keyword_pattern,
)

DOB_KEYWORDS: tuple[str, ...] = (
    "Ngày sinh",
    "Sinh ngày",
    "DOB",
    "Date of birth",
    "Ngày",
    "Sinh",
)

_KEYWORD_PATTERNS = [keyword_pattern(k) for k in DOB_KEYWORDS]

_DATE = re.compile(r"([0-9]{1,2})[/\-.]([0-9]{1,2})[/\-.]([0-9]{4})")
_STRICT_DATE = re.compile(r"\b[0-9]{2}[/\-.][0-9]{2}[/\-.][0-9]{4}\b")
_LENIENT_DATE = re.compile(r"\b[0-9]{1,2}[/\-.][0-9]{1,2}[/\-.][0-9]{4}\b")


class BirthDateRule(FieldRule):
    """Extracts the date of birth and normalizes it to ``YYYY-MM-DD``.

    Only numeric ranges are checked, not calendar validity, so 31/02 is
    accepted while month 13 is not.

    Args:
        min_year: Earliest plausible birth year.
        max_year: Latest plausible birth year.
    """

    field_name = "dob"

    def __init__(self, min_year: int = 1950, max_year: int = 2006) -> None:
        self.min_year = min_year
        self.max_year = max_year

    def strategies(self) -> list[Strategy]:
        return [
            Strategy(KEYWORD_GLOBAL, self._keyword_global),
            Strategy(KEYWORD_LINE, self._keyword_line),
            Strategy(GLOBAL_FALLBACK, self._global_fallback),
        ]

    def validate(self, candidate: str, strategy: str) -> str | None:
        match = _DATE.fullmatch(candidate.strip())
        if match is None:
            return None
        day, month, year = (int(part) for part in match.groups())
        if not (1 <= day <= 31 and 1 <= month <= 12):
            return None
        if not (self.min_year <= year <= self.max_year):
            return None
        return f"{year:04d}-{month:02d}-{day:02d}"

    def _after_keywords(self, source: str) -> Iterator[str]:
        """Yield the first date after the first occurrence of each keyword."""
        for pattern in _KEYWORD_PATTERNS:
            keyword = pattern.search(source)
            if keyword is None:
                continue
            date = _DATE.search(source, keyword.end())
            if date:
                yield date.group(0)

    def _keyword_global(self, text: RecognizedText) -> Iterator[str]:
        yield from self._after_keywords(text.normalized)

    def _keyword_line(self, text: RecognizedText) -> Iterator[str]:
        for line in text.lines:
            yield from self._after_keywords(line)

    def _global_fallback(self, text: RecognizedText) -> Iterator[str]:
        for pattern in (_STRICT_DATE, _LENIENT_DATE):
            for match in pattern.finditer(text.normalized):
                yield match.group(0)
