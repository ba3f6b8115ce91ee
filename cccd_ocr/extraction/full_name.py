"""Full name extraction.

A Vietnamese personal name is two to five capitalized words written in
the Vietnamese alphabet. The name label is the strongest anchor; when
the recognizer drops the label, any line shaped like a name is taken,
as long as it does not look like another card field.
"""

import re
from collections.abc import Iterator

from .base import (
    DATE_SHAPE,
    KEYWORD_GLOBAL,
    KEYWORD_LINE,
    STANDALONE_LINE,
    FieldRule,
    RecognizedText,
    Strategy,
    collapse_whitespace,
    keyword_pattern,
)

NAME_KEYWORDS: tuple[str, ...] = ("Họ và tên", "Họ tên", "Tên", "Full name", "Name")

_UPPER = "A-ZÀÁẢÃẠĂẰẮẲẴẶÂẦẤẨẪẬĐÈÉẺẼẸÊỀẾỂỄỆÌÍỈĨỊÒÓỎÕỌÔỒỐỔỖỘƠỜỚỞỠỢÙÚỦŨỤƯỪỨỬỮỰỲÝỶỸỴ"
_LOWER = "a-zàáảãạăằắẳẵặâầấẩẫậđèéẻẽẹêềếểễệìíỉĩịòóỏõọôồốổỗộơờớởỡợùúủũụưừứửữựỳýỷỹỵ"

_NAME_RUN = rf"[{_UPPER}][{_UPPER}{_LOWER}\s]{{4,}}"
_NAME_AFTER_LABEL = re.compile(rf"[:\s]*({_NAME_RUN})")
_NAME_LINE = re.compile(_NAME_RUN)

_KEYWORD_PATTERNS = [keyword_pattern(k) for k in NAME_KEYWORDS]

# Labels of the fields printed after the name. In the normalized text the
# name runs straight into the next label, so candidates are cut there.
_NEXT_LABELS: tuple[str, ...] = (
    "Ngày sinh",
    "Sinh ngày",
    "Ngày",
    "Date of birth",
    "DOB",
    "Giới tính",
    "Sex",
    "Quốc tịch",
    "Nationality",
    "Quê quán",
    "Place of origin",
    "Nơi thường trú",
    "Place of residence",
    "Có giá trị",
    "Số",
    "CCCD",
    "CMND",
)
_NEXT_LABEL = re.compile(
    r"\b(?:"
    + "|".join(r"\s+".join(map(re.escape, label.split())) for label in _NEXT_LABELS)
    + r")\b",
    re.IGNORECASE,
)

_ID_RUN = re.compile(r"(?<![0-9])[0-9]{12,13}(?![0-9])")
# Words that never appear in a name but do appear in card headers and
# labels. Only applied to unanchored lines.
_NOT_NAME_WORDS = re.compile(
    r"\b(?:CCCD|CMND|Số|Ngày|Địa|Address|Căn\s+cước|Công\s+dân|Độc\s+lập"
    r"|Hạnh\s+phúc|Giới\s+tính|Quốc\s+tịch|Quê\s+quán|Citizen|Identity|Card"
    r"|Họ\s+và\s+tên|Họ\s+tên|Full\s+name|Name)\b",
    re.IGNORECASE,
)
_NON_LETTERS = re.compile(r"[^\w\s]|[\d_]")

MIN_WORDS, MAX_WORDS = 2, 5
MIN_LENGTH, MAX_LENGTH = 5, 50


def _cut_at_next_label(candidate: str) -> str:
    label = _NEXT_LABEL.search(candidate)
    return candidate[: label.start()] if label else candidate


class FullNameRule(FieldRule):
    """Extracts the card holder's full name."""

    field_name = "full_name"

    def strategies(self) -> list[Strategy]:
        return [
            Strategy(KEYWORD_GLOBAL, self._keyword_global),
            Strategy(KEYWORD_LINE, self._keyword_line),
            Strategy(STANDALONE_LINE, self._standalone_line),
        ]

    def validate(self, candidate: str, strategy: str) -> str | None:
        # Misaligned reads pull the ID number or a date in after the label.
        if _ID_RUN.search(candidate) or DATE_SHAPE.search(candidate):
            return None
        if strategy == STANDALONE_LINE and _NOT_NAME_WORDS.search(candidate):
            return None

        name = collapse_whitespace(_NON_LETTERS.sub("", candidate))
        words = name.split()
        if not MIN_WORDS <= len(words) <= MAX_WORDS:
            return None
        if not MIN_LENGTH <= len(name) <= MAX_LENGTH:
            return None
        return name

    def _after_keywords(self, source: str) -> Iterator[str]:
        """Yield the name run after the first occurrence of each keyword."""
        for pattern in _KEYWORD_PATTERNS:
            keyword = pattern.search(source)
            if keyword is None:
                continue
            match = _NAME_AFTER_LABEL.match(source, keyword.end())
            if match:
                yield _cut_at_next_label(match.group(1))

    def _keyword_global(self, text: RecognizedText) -> Iterator[str]:
        yield from self._after_keywords(text.normalized)

    def _keyword_line(self, text: RecognizedText) -> Iterator[str]:
        for line in text.lines:
            yield from self._after_keywords(line)

    def _standalone_line(self, text: RecognizedText) -> Iterator[str]:
        # Stray punctuation around the name is stripped by validate().
        for line in text.lines:
            if _NAME_LINE.search(line):
                yield line
