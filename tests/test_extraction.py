"""Tests for CCCD field extraction from recognized text."""

import pytest

from cccd_ocr.extraction.base import (
    GLOBAL_FALLBACK,
    KEYWORD_GLOBAL,
    KEYWORD_LINE,
    STANDALONE_LINE,
    RecognizedText,
)
from cccd_ocr.extraction.birth_date import BirthDateRule
from cccd_ocr.extraction.cccd_extractor import (
    CCCDExtractor,
    CCCDInfo,
    extract_cccd_fields,
)
from cccd_ocr.extraction.full_name import FullNameRule
from cccd_ocr.extraction.national_id import NationalIdRule
from cccd_ocr.utils.config import ExtractionConfig


def _text(raw: str) -> RecognizedText:
    return RecognizedText.from_raw(raw)


class TestRecognizedText:
    """Tests for the line and normalized views of recognizer output."""

    def test_lines_trimmed_and_empty_dropped(self) -> None:
        text = _text("  first  \n\n\t second\n   \nthird")
        assert text.lines == ("first", "second", "third")

    def test_normalized_collapses_whitespace(self) -> None:
        text = _text(" Họ và tên:\n  Nguyễn   Văn\tAn \n")
        assert text.normalized == "Họ và tên: Nguyễn Văn An"

    def test_none_is_empty(self) -> None:
        text = _text(None)
        assert text.raw == ""
        assert text.lines == ()
        assert text.normalized == ""


class TestNationalIdRule:
    """Tests for national ID extraction."""

    def setup_method(self) -> None:
        self.rule = NationalIdRule()

    def test_keyword_cccd(self) -> None:
        result = self.rule.extract(_text("Số CCCD: 012345678912"))
        assert result is not None
        assert result.value == "012345678912"
        assert result.strategy == KEYWORD_GLOBAL

    def test_thirteen_digits(self) -> None:
        result = self.rule.extract(_text("CCCD 0123456789123"))
        assert result.value == "0123456789123"

    def test_grouped_digits(self) -> None:
        result = self.rule.extract(_text("Số: 001 095 012 345"))
        assert result.value == "001095012345"

    def test_misread_keyword(self) -> None:
        result = self.rule.extract(_text("sánh 001095012345"))
        assert result.value == "001095012345"
        assert result.strategy == KEYWORD_GLOBAL

    def test_keyword_on_previous_line(self) -> None:
        result = self.rule.extract(_text("Căn cước\n001095012345"))
        assert result.value == "001095012345"
        assert result.strategy == KEYWORD_GLOBAL

    def test_new_card_label(self) -> None:
        text = "Số định danh cá nhân / Personal identification number: 079203001234"
        assert self.rule.extract(_text(text)).value == "079203001234"

    def test_standalone_line(self) -> None:
        result = self.rule.extract(_text("CĂN CƯỚC CÔNG DÂN\n079203001234\nNguyễn Văn An"))
        assert result.value == "079203001234"
        assert result.strategy == STANDALONE_LINE

    def test_first_keyworded_id_wins(self) -> None:
        result = self.rule.extract(_text("Số 001095012345 CCCD 079203001234"))
        assert result.value == "001095012345"

    def test_bilingual_number_label_not_a_keyword(self) -> None:
        result = self.rule.extract(_text("Số / No.: 079203001234"))
        assert result.value == "079203001234"
        assert result.strategy == STANDALONE_LINE

    def test_standalone_skips_date_lines(self) -> None:
        text = "Ngày 079203001234\nDate 12/01/2020 001095012345"
        assert self.rule.extract(_text(text)) is None

    def test_global_fallback_on_dated_line_far_from_date(self) -> None:
        text = "Date: noise noise noise noise noise 079203001234"
        result = self.rule.extract(_text(text))
        assert result.value == "079203001234"
        assert result.strategy == GLOBAL_FALLBACK

    def test_global_fallback_rejects_near_date(self) -> None:
        assert self.rule.extract(_text("birth 05/03/1995 079203001234")) is None

    def test_longer_digit_runs_ignored(self) -> None:
        assert self.rule.extract(_text("Số 12345678901234567")) is None

    def test_short_numbers_ignored(self) -> None:
        assert self.rule.extract(_text("Số 123456789")) is None

    def test_validate(self) -> None:
        assert self.rule.validate("001 095 012 345", KEYWORD_LINE) == "001095012345"
        assert self.rule.validate("00109501234", KEYWORD_LINE) is None
        assert self.rule.validate("00109501234a", KEYWORD_LINE) is None


class TestBirthDateRule:
    """Tests for date of birth extraction."""

    def setup_method(self) -> None:
        self.rule = BirthDateRule()

    def test_keyword_date(self) -> None:
        result = self.rule.extract(_text("Ngày sinh: 05/03/1995"))
        assert result.value == "1995-03-05"
        assert result.strategy == KEYWORD_GLOBAL

    @pytest.mark.parametrize(
        "raw", ["Ngày sinh 5-3-1995", "DOB 05.03.1995", "Date of birth: 5/03/1995"]
    )
    def test_separators_and_short_parts(self, raw: str) -> None:
        assert self.rule.extract(_text(raw)).value == "1995-03-05"

    def test_numeric_ranges_only(self) -> None:
        result = self.rule.extract(_text("Ngày sinh 31/02/2001"))
        assert result.value == "2001-02-31"

    def test_month_13_rejected(self) -> None:
        assert self.rule.extract(_text("Ngày sinh 15/13/2001")) is None

    def test_month_13_falls_through_to_next_date(self) -> None:
        text = "Ngày sinh 15/13/2001\nCó giá trị đến 15/12/2001"
        result = self.rule.extract(_text(text))
        assert result.value == "2001-12-15"
        assert result.strategy == GLOBAL_FALLBACK

    def test_year_outside_window_rejected(self) -> None:
        assert self.rule.extract(_text("Ngày sinh 01/01/2010")) is None
        assert self.rule.extract(_text("Ngày sinh 01/01/1949")) is None

    def test_window_is_configurable(self) -> None:
        rule = BirthDateRule(min_year=1950, max_year=2012)
        assert rule.extract(_text("Ngày sinh 01/01/2010")).value == "2010-01-01"

    def test_skips_issue_date_before_birth_date(self) -> None:
        text = "Ngày cấp 10/08/2021\nNgày sinh: 05/03/1995"
        assert self.rule.extract(_text(text)).value == "1995-03-05"

    def test_fallback_without_keyword(self) -> None:
        result = self.rule.extract(_text("NGUYEN VAN AN\n05/03/1995"))
        assert result.value == "1995-03-05"
        assert result.strategy == GLOBAL_FALLBACK

    def test_no_date(self) -> None:
        assert self.rule.extract(_text("Ngày sinh: không rõ")) is None

    def test_only_first_keyword_occurrence_searched(self) -> None:
        result = self.rule.extract(_text("Ngày sinh 15/13/2001 Ngày sinh 05/03/1995"))
        assert result.value == "1995-03-05"
        assert result.strategy == GLOBAL_FALLBACK


class TestFullNameRule:
    """Tests for full name extraction."""

    def setup_method(self) -> None:
        self.rule = FullNameRule()

    def test_keyword_name(self) -> None:
        result = self.rule.extract(_text("Họ và tên: Nguyễn Văn An"))
        assert result.value == "Nguyễn Văn An"

    def test_name_cut_at_next_label(self) -> None:
        result = self.rule.extract(_text("Họ và tên: Trần Thị Bích Ngọc\nNgày sinh: 01/01/1990"))
        assert result.value == "Trần Thị Bích Ngọc"
        assert result.strategy == KEYWORD_GLOBAL

    def test_bilingual_label_with_name_on_next_line(self) -> None:
        text = "Họ và tên / Full name:\nLÊ HOÀNG PHƯƠNG\nNgày sinh / Date of birth: 02/09/1988"
        assert self.rule.extract(_text(text)).value == "LÊ HOÀNG PHƯƠNG"

    def test_keyword_followed_by_id_rejected(self) -> None:
        assert self.rule.extract(_text("Họ và tên 012345678912")) is None

    def test_single_word_rejected(self) -> None:
        assert self.rule.extract(_text("Họ và tên: Nguyễn")) is None

    def test_too_many_words_rejected(self) -> None:
        assert self.rule.extract(_text("Tên: An Bình Cường Dũng Em Phúc")) is None

    def test_standalone_line(self) -> None:
        text = "CĂN CƯỚC CÔNG DÂN\nPhạm Minh Tuấn\n079203001234"
        result = self.rule.extract(_text(text))
        assert result.value == "Phạm Minh Tuấn"
        assert result.strategy == STANDALONE_LINE

    @pytest.mark.parametrize(
        "line", ["Nguyễn Văn An.", "Nguyễn Văn An,", "- Nguyễn Văn An", "'Nguyễn Văn An"]
    )
    def test_standalone_line_with_stray_punctuation(self, line: str) -> None:
        text = f"CĂN CƯỚC CÔNG DÂN\n{line}\n079203001234"
        result = self.rule.extract(_text(text))
        assert result.value == "Nguyễn Văn An"
        assert result.strategy == STANDALONE_LINE

    def test_standalone_skips_labels_and_headers(self) -> None:
        text = "CĂN CƯỚC CÔNG DÂN\nSố Định Danh\nNgày Cấp Thẻ"
        assert self.rule.extract(_text(text)) is None

    def test_standalone_skips_name_label_line(self) -> None:
        text = "Họ và tên / Full name:\n0123 45\nTrần Văn Bình."
        result = self.rule.extract(_text(text))
        assert result.value == "Trần Văn Bình"
        assert result.strategy == STANDALONE_LINE

    def test_only_first_keyword_occurrence_searched(self) -> None:
        text = "Họ và tên: 012345678912\nHọ và tên: Nguyễn Văn An"
        result = self.rule.extract(_text(text))
        assert result.value == "Nguyễn Văn An"
        assert result.strategy == KEYWORD_LINE

    def test_punctuation_stripped(self) -> None:
        assert self.rule.validate("Nguyễn Văn, An.", KEYWORD_LINE) == "Nguyễn Văn An"

    def test_validate_rejects_date(self) -> None:
        assert self.rule.validate("Nguyễn An 05/03/1995", KEYWORD_LINE) is None


class TestCCCDInfo:
    """Tests for the output record."""

    def test_immutable(self) -> None:
        info = CCCDInfo(full_name="Nguyễn Văn An")
        with pytest.raises(AttributeError):
            info.full_name = "Other"  # type: ignore[misc]

    def test_to_dict_only_populated(self) -> None:
        info = CCCDInfo(national_id="001095012345", dob="1995-03-05")
        assert info.to_dict() == {"nationalId": "001095012345", "dob": "1995-03-05"}
        assert not info.is_empty
        assert CCCDInfo().is_empty


class TestCCCDExtractor:
    """Tests for the combined extractor."""

    def setup_method(self) -> None:
        self.extractor = CCCDExtractor()

    def test_end_to_end_text(self, sample_card_text: str) -> None:
        info = self.extractor.extract(sample_card_text)
        assert info.full_name == "Nguyễn Văn An"
        assert info.dob == "1995-03-05"
        assert info.national_id == "001095012345"
        assert info.address is None
        assert info.gender is None
        assert info.nationality is None

    def test_realistic_card(self) -> None:
        text = (
            "CỘNG HÒA XÃ HỘI CHỦ NGHĨA VIỆT NAM\n"
            "Độc lập - Tự do - Hạnh phúc\n"
            "CĂN CƯỚC CÔNG DÂN\n"
            "Số / No.: 079203001234\n"
            "Họ và tên / Full name:\n"
            "TRẦN THỊ MAI\n"
            "Ngày sinh / Date of birth: 12/11/1990\n"
            "Giới tính / Sex: Nữ Quốc tịch / Nationality: Việt Nam\n"
            "Có giá trị đến: 12/11/2030\n"
        )
        info = self.extractor.extract(text)
        assert info.national_id == "079203001234"
        assert info.full_name == "TRẦN THỊ MAI"
        assert info.dob == "1990-11-12"

    def test_empty_text(self) -> None:
        assert self.extractor.extract("") == CCCDInfo()
        assert self.extractor.extract(None) == CCCDInfo()

    def test_garbage_never_raises(self) -> None:
        info = self.extractor.extract("@@@ ### \x00 ??? 12/34/5678 Số: abc")
        assert info.national_id is None
        assert info.dob is None

    def test_fields_independent(self) -> None:
        info = self.extractor.extract("Số CCCD: 001095012345")
        assert info.national_id == "001095012345"
        assert info.full_name is None
        assert info.dob is None

    def test_report_records_strategies(self, sample_card_text: str) -> None:
        report = self.extractor.extract_report(sample_card_text)
        assert set(report.fields) == {"full_name", "national_id", "dob"}
        assert report.fields["national_id"].strategy == KEYWORD_GLOBAL
        assert report.text.lines[0] == "CỘNG HÒA XÃ HỘI CHỦ NGHĨA VIỆT NAM"

    def test_config_window(self) -> None:
        extractor = CCCDExtractor(ExtractionConfig(max_birth_year=2012))
        assert extractor.extract("Ngày sinh 01/01/2010").dob == "2010-01-01"
        assert extract_cccd_fields("Ngày sinh 01/01/2010").dob is None
