"""Structured CCCD field extraction from recognized text.

Combines the per-field strategy chains into a single extractor that
turns the recognizer's text blob into a :class:`CCCDInfo` record.
"""

from dataclasses import dataclass, field

from cccd_ocr.utils.config import ExtractionConfig
from cccd_ocr.utils.logger import get_logger, redact

from .base import ExtractedField, FieldRule, RecognizedText
from .birth_date import BirthDateRule
from .full_name import FullNameRule
from .national_id import NationalIdRule

logger = get_logger(__name__)

CAMEL_CASE_KEYS = {
    "full_name": "fullName",
    "national_id": "nationalId",
    "dob": "dob",
    "address": "address",
    "gender": "gender",
    "nationality": "nationality",
}


@dataclass(frozen=True)
class CCCDInfo:
    """Fields read from a CCCD card.

    Every populated field has passed its validator. ``address``,
    ``gender`` and ``nationality`` are reserved and currently always
    ``None``.
    """

    full_name: str | None = None
    national_id: str | None = None
    dob: str | None = None
    address: str | None = None
    gender: str | None = None
    nationality: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Return the populated fields keyed by their camelCase names."""
        return {
            camel: getattr(self, name)
            for name, camel in CAMEL_CASE_KEYS.items()
            if getattr(self, name) is not None
        }

    @property
    def is_empty(self) -> bool:
        """Whether no field was extracted."""
        return not self.to_dict()


@dataclass(frozen=True)
class ExtractionReport:
    """Extraction output together with how each field was found."""

    info: CCCDInfo
    text: RecognizedText
    fields: dict[str, ExtractedField] = field(default_factory=dict)


class CCCDExtractor:
    """Extracts full name, national ID and date of birth from OCR text.

    Each field is searched independently; a missing field is ``None``,
    never an empty string or a guess.

    Args:
        config: Extraction settings (plausible birth-year window).
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self.rules: list[FieldRule] = [
            FullNameRule(),
            NationalIdRule(),
            BirthDateRule(self.config.min_birth_year, self.config.max_birth_year),
        ]

    def extract(self, text: str | None) -> CCCDInfo:
        """Extract CCCD fields from recognized text.

        Args:
            text: Raw recognizer output; ``None`` is treated as empty.

        Returns:
            A record with the fields that could be found.
        """
        return self.extract_report(text).info

    def extract_report(self, text: str | None) -> ExtractionReport:
        """Extract CCCD fields and report which strategy found each one."""
        recognized = RecognizedText.from_raw(text)
        found: dict[str, ExtractedField] = {}

        for rule in self.rules:
            extracted = rule.extract(recognized)
            if extracted is not None:
                found[rule.field_name] = extracted

        info = CCCDInfo(**{name: f.value for name, f in found.items()})
        logger.info(
            "Extracted %d/%d fields from %d lines (id=%s, dob=%s)",
            len(found),
            len(self.rules),
            len(recognized.lines),
            redact(info.national_id),
            redact(info.dob),
        )
        return ExtractionReport(info=info, text=recognized, fields=found)


def extract_cccd_fields(text: str | None, config: ExtractionConfig | None = None) -> CCCDInfo:
    """Extract CCCD fields from text with a one-off extractor."""
    return CCCDExtractor(config).extract(text)
