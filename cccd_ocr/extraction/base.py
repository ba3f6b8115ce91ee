"""Building blocks for heuristic field extraction from OCR text.

A field is extracted by running an ordered list of strategies. Each
strategy lazily yields raw candidate strings; the field's validator
accepts or rejects each one, and the first accepted candidate ends the
search. Later strategies never run once a value is accepted.
"""

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)

KEYWORD_GLOBAL = "keyword_global"
KEYWORD_LINE = "keyword_line"
STANDALONE_LINE = "standalone_line"
GLOBAL_FALLBACK = "global_fallback"

# D/M/YYYY with any of the separators seen on cards and in OCR output.
DATE_SHAPE = re.compile(r"[0-9]{1,2}[/\-.][0-9]{1,2}[/\-.][0-9]{4}")

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class RecognizedText:
    """Raw recognizer output with the two views the strategies search.

    Attributes:
        raw: Text exactly as returned by the recognizer.
        lines: Non-empty trimmed lines, in their original order.
        normalized: The whole text with whitespace runs collapsed to one
            space, so values split across lines by the recognizer line up
            with their labels again.
    """

    raw: str
    lines: tuple[str, ...]
    normalized: str

    @classmethod
    def from_raw(cls, text: str | None) -> "RecognizedText":
        raw = text or ""
        lines = tuple(line.strip() for line in raw.splitlines() if line.strip())
        normalized = _WHITESPACE.sub(" ", raw).strip()
        return cls(raw=raw, lines=lines, normalized=normalized)


@dataclass(frozen=True)
class ExtractedField:
    """A validated field value and the strategy that found it."""

    field_name: str
    value: str
    strategy: str


@dataclass(frozen=True)
class Strategy:
    """One named way of producing raw candidates for a field."""

    name: str
    candidates: Callable[[RecognizedText], Iterator[str]]


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile a case-insensitive whole-word pattern for a label.

    Inner spaces match any whitespace run, since OCR output spaces labels
    unpredictably.
    """
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


def collapse_whitespace(value: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE.sub(" ", value).strip()


class FieldRule:
    """Base class for a field extracted by an ordered strategy chain.

    Subclasses set ``field_name`` and implement :meth:`strategies` and
    :meth:`validate`.
    """

    field_name: str = ""

    def strategies(self) -> list[Strategy]:
        raise NotImplementedError

    def validate(self, candidate: str, strategy: str) -> str | None:
        """Return the normalized value, or ``None`` to reject the candidate."""
        raise NotImplementedError

    def extract(self, text: RecognizedText) -> ExtractedField | None:
        """Run the strategies in order and return the first accepted value.

        Args:
            text: Recognized text to search.

        Returns:
            The extracted field, or ``None`` when every strategy is exhausted.
        """
        for strategy in self.strategies():
            for candidate in strategy.candidates(text):
                value = self.validate(candidate, strategy.name)
                if value is not None:
                    logger.debug("%s found by %s", self.field_name, strategy.name)
                    return ExtractedField(self.field_name, value, strategy.name)
                logger.debug(
                    "%s candidate rejected by validation (%s)",
                    self.field_name,
                    strategy.name,
                )
        logger.debug("%s not found", self.field_name)
        return None
