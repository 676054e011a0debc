"""
Validation Function Tests for the Booking Bot service

Date checks run against a fixed "now" with stub recognizers so results do not
depend on the wall clock.
"""

import pytest
from datetime import timedelta

from ..config import BookingConfig
from ..models import DateTimeResolution, RejectionReason
from ..validation import validate_age, validate_date, validate_name
from .conftest import (
    FIXED_NOW, FailingRecognizer, StubDateTimeRecognizer, StubNumberRecognizer
)


def _value_at(delta: timedelta) -> DateTimeResolution:
    return DateTimeResolution(text="x", value=str(FIXED_NOW + delta))


class TestNameValidation:
    """Test name validation"""

    @pytest.mark.parametrize("raw, expected", [
        ("Tomaž", "Tomaž"),
        ("  Ana Novak  ", "Ana Novak"),
        ("x", "x"),
        ("R2-D2 !!", "R2-D2 !!"),
    ])
    def test_valid_names_are_trimmed_verbatim(self, raw, expected):
        result = validate_name(raw)
        assert result.is_valid
        assert result.value == expected

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_blank_names_are_rejected(self, raw):
        result = validate_name(raw)
        assert not result.is_valid
        assert result.value is None
        assert result.error.reason == RejectionReason.EMPTY
        assert result.error.message


class TestAgeValidation:
    """Test age validation"""

    @pytest.mark.parametrize("raw, expected", [
        ("18", 18),
        ("120", 120),
        ("25", 25),
        ("I am 42 years old", 42),
        ("twenty five", 25),
        ("one hundred and five", 105),
        ("thirty thirty", 30),
        ("two dozen", 24),
    ])
    def test_valid_ages(self, raw, expected):
        result = validate_age(raw)
        assert result.is_valid
        assert result.value == expected

    @pytest.mark.parametrize("raw", ["17", "121", "0", "twelve", "-30", "1,000"])
    def test_out_of_range_ages(self, raw):
        result = validate_age(raw)
        assert not result.is_valid
        assert result.error.reason == RejectionReason.OUT_OF_RANGE_OR_UNRECOGNIZED
        assert "18" in result.error.message and "120" in result.error.message

    @pytest.mark.parametrize("raw", ["banana", "", "   ", "25.5"])
    def test_unparseable_ages(self, raw):
        result = validate_age(raw)
        assert not result.is_valid
        assert result.error.reason == RejectionReason.UNPARSEABLE

    def test_messages_differ_by_reason(self):
        out_of_range = validate_age("17").error.message
        unparseable = validate_age("banana").error.message
        assert out_of_range != unparseable

    def test_first_in_range_candidate_wins(self):
        result = validate_age("", recognizer=StubNumberRecognizer(["10", "50", "60"]))
        assert result.value == 50

    def test_conversion_failure_before_match_is_unparseable(self):
        result = validate_age("", recognizer=StubNumberRecognizer(["abc", "50"]))
        assert result.error.reason == RejectionReason.UNPARSEABLE

    def test_recognizer_failure(self):
        result = validate_age("25", recognizer=FailingRecognizer())
        assert result.error.reason == RejectionReason.UNPARSEABLE

    def test_custom_range(self):
        config = BookingConfig(min_age=5, max_age=10)
        assert validate_age("7", config=config).value == 7
        assert validate_age("18", config=config).error.reason == RejectionReason.OUT_OF_RANGE_OR_UNRECOGNIZED


class TestDateValidation:
    """Test date validation against a fixed clock"""

    def test_too_soon(self):
        recognizer = StubDateTimeRecognizer([_value_at(timedelta(minutes=30))])
        result = validate_date("in half an hour", recognizer, now=FIXED_NOW)

        assert not result.is_valid
        assert result.error.reason == RejectionReason.TOO_SOON_OR_UNRECOGNIZED
        assert "one hour" in result.error.message
        assert "DD.MM.YYYY" in result.error.message

    def test_exactly_one_hour_is_too_soon(self):
        recognizer = StubDateTimeRecognizer([_value_at(timedelta(hours=1))])
        result = validate_date("in an hour", recognizer, now=FIXED_NOW)
        assert result.error.reason == RejectionReason.TOO_SOON_OR_UNRECOGNIZED

    def test_two_hours_ahead_is_accepted_as_date_only(self):
        recognizer = StubDateTimeRecognizer([_value_at(timedelta(hours=2))])
        result = validate_date("in two hours", recognizer, now=FIXED_NOW)

        assert result.is_valid
        assert result.value == "10/03/2026"

    def test_range_uses_start(self):
        recognizer = StubDateTimeRecognizer([DateTimeResolution(
            text="x",
            start=str(FIXED_NOW + timedelta(hours=2)),
            end=str(FIXED_NOW + timedelta(days=3)),
        )])
        result = validate_date("between 11 and 3 days later", recognizer, now=FIXED_NOW)
        assert result.value == "10/03/2026"

    def test_first_future_candidate_wins(self):
        recognizer = StubDateTimeRecognizer([
            _value_at(timedelta(days=-1)),
            _value_at(timedelta(days=5)),
            _value_at(timedelta(days=1)),
        ])
        result = validate_date("x", recognizer, now=FIXED_NOW)
        assert result.value == "15/03/2026"

    def test_unparseable_candidate_is_skipped(self):
        recognizer = StubDateTimeRecognizer([
            DateTimeResolution(text="x", value="not a date"),
            _value_at(timedelta(days=1)),
        ])
        result = validate_date("x", recognizer, now=FIXED_NOW)
        assert result.value == "11/03/2026"

    def test_nothing_recognized(self):
        result = validate_date("qwerty", StubDateTimeRecognizer([]), now=FIXED_NOW)
        assert result.error.reason == RejectionReason.TOO_SOON_OR_UNRECOGNIZED

    def test_recognizer_failure(self):
        result = validate_date("tomorrow", FailingRecognizer(), now=FIXED_NOW)
        assert result.error.reason == RejectionReason.UNPARSEABLE
        assert "one hour" in result.error.message
        assert "MM/DD/YYYY" in result.error.message

    def test_timezone_aware_candidate(self):
        recognizer = StubDateTimeRecognizer([
            DateTimeResolution(text="x", value="2030-01-01 12:00:00+00:00")
        ])
        result = validate_date("x", recognizer, now=FIXED_NOW)
        assert result.is_valid

    def test_date_format_from_config(self):
        config = BookingConfig(date_format="%Y-%m-%d")
        recognizer = StubDateTimeRecognizer([_value_at(timedelta(days=1))])
        result = validate_date("x", recognizer, config, now=FIXED_NOW)
        assert result.value == "2026-03-11"

    def test_real_recognizer(self):
        result = validate_date("tomorrow at 5pm", now=FIXED_NOW)
        assert result.value == "11/03/2026"

    def test_real_recognizer_numeric_date(self):
        result = validate_date("11/14/2026", now=FIXED_NOW)
        assert result.value == "14/11/2026"

    def test_real_recognizer_dotted_date(self):
        result = validate_date("05.11.2026", now=FIXED_NOW)
        assert result.value == "05/11/2026"

    @pytest.mark.parametrize("raw, expected", [
        ("between 3pm and 5pm tomorrow", "11/03/2026"),
        ("from 10am to 11am on friday", "13/03/2026"),
    ])
    def test_real_recognizer_time_range(self, raw, expected):
        result = validate_date(raw, now=FIXED_NOW)
        assert result.value == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
