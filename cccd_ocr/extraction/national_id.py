"""National ID number extraction.

CCCD numbers are 12 digits (13 on some older and misread cards). The
recognizer may split them into groups of three, and the strongest
signal is a label right before the number. Standalone digit runs are
only trusted away from anything that looks like a date.
"""

import re
from collections.abc import Iterator

from .base import (
    DATE_SHAPE,
    GLOBAL_FALLBACK,
    KEYWORD_GLOBAL,
    KEYWORD_LINE,
    STANDALONE_LINE,
    FieldRule,
    RecognizedText,
    Strategy,
)

# "sánh" is a frequent misread of "Số".
ID_KEYWORDS: tuple[str, ...] = (
    "Số định danh cá nhân",
    "Personal identification number",
    "Số CCCD",
    "Số",
    "CCCD",
    "Căn cước",
    "sánh",
)

_ID_DIGITS = r"[0-9]{3}\s?[0-9]{3}\s?[0-9]{3}\s?[0-9]{3,4}"

_KEYWORDED_ID = re.compile(
    r"\b(?:"
    + "|".join(r"\s+".join(map(re.escape, k.split())) for k in ID_KEYWORDS)
    + rf")\.?[:\s]*({_ID_DIGITS})(?![0-9])",
    re.IGNORECASE,
)
_STANDALONE_ID = re.compile(rf"(?<![0-9])({_ID_DIGITS})(?![0-9])")
_PLAIN_ID = re.compile(r"(?<![0-9])[0-9]{12,13}(?![0-9])")
_VALID_ID = re.compile(r"[0-9]{12,13}")

_DATE_CONTEXT = ("ngày", "date", "birth")
_CONTEXT_WINDOW = 20


def _looks_like_date_line(line: str) -> bool:
    lowered = line.lower()
    return any(token in lowered for token in _DATE_CONTEXT) or bool(
        DATE_SHAPE.search(line)
    )


class NationalIdRule(FieldRule):
    """Extracts the 12-13 digit national ID number."""

    field_name = "national_id"

    def strategies(self) -> list[Strategy]:
        return [
            Strategy(KEYWORD_GLOBAL, self._keyword_global),
            Strategy(KEYWORD_LINE, self._keyword_line),
            Strategy(STANDALONE_LINE, self._standalone_line),
            Strategy(GLOBAL_FALLBACK, self._global_fallback),
        ]

    def validate(self, candidate: str, strategy: str) -> str | None:
        digits = re.sub(r"\s+", "", candidate)
        return digits if _VALID_ID.fullmatch(digits) else None

    def _keyword_global(self, text: RecognizedText) -> Iterator[str]:
        match = _KEYWORDED_ID.search(text.normalized)
        if match:
            yield match.group(1)

    def _keyword_line(self, text: RecognizedText) -> Iterator[str]:
        for line in text.lines:
            match = _KEYWORDED_ID.search(line)
            if match:
                yield match.group(1)

    def _standalone_line(self, text: RecognizedText) -> Iterator[str]:
        for line in text.lines:
            if _looks_like_date_line(line):
                continue
            for match in _STANDALONE_ID.finditer(line):
                yield match.group(1)

    def _global_fallback(self, text: RecognizedText) -> Iterator[str]:
        normalized = text.normalized
        for match in _PLAIN_ID.finditer(normalized):
            window = normalized[
                max(0, match.start() - _CONTEXT_WINDOW) : match.end() + _CONTEXT_WINDOW
            ]
            if DATE_SHAPE.search(window):
                continue
            yield match.group(0)
