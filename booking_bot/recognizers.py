"""
Recognizers for the Booking Bot service

Turns free text into ordered number and date-time candidates. The validators
only depend on the shape of the resolutions returned here, so any recognizer
with the same recognize() signature can be injected instead.

Number words are understood through word2number; date-times through
dateparser, which also handles relative expressions such as "tomorrow at 5pm"
or "Sunday".
"""

import logging
import re
from datetime import datetime
from typing import List

import dateparser
from dateparser.search import search_dates
from word2number import w2n

from booking_bot.models import DateTimeResolution, NumberResolution

logger = logging.getLogger(__name__)


class RecognitionError(Exception):
    """Raised when a recognizer cannot make sense of its input"""


# ============================================================================
# Number Recognition
# ============================================================================

UNIT_WORDS = {
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
}
TEEN_WORDS = {
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen",
    "seventeen", "eighteen", "nineteen",
}
TENS_WORDS = {
    "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety",
}
SCALE_WORDS = {"hundred", "thousand", "million", "billion"}
NUMBER_WORDS = UNIT_WORDS | TEEN_WORDS | TENS_WORDS | SCALE_WORDS

# Numerals ("25", "-3", "1,000", "25.5", "25,5") or single words
TOKEN_PATTERN = re.compile(
    r"(?<!\w)[-+]?(?:\d{1,3}(?:,\d{3})+(?![.,]?\d)|\d+(?:[.,]\d+)?)|[^\W\d_]+"
)
THOUSANDS_PATTERN = re.compile(r"[-+]?\d{1,3}(?:,\d{3})+")


class NumberRecognizer:
    """
    Finds numbers in free text, in the order they appear.

    Numerals are returned as written, with thousands separators dropped and a
    decimal comma turned into a point. Runs of English number words ("one
    hundred and five", "a dozen") are converted with word2number; a word that
    cannot extend the run before it starts a new number, so "thirty thirty"
    is two candidates. Text without any numeric content is treated as a
    recognition failure rather than an empty result.
    """

    def __init__(self, culture: str = "en"):
        self.culture = culture
        self._words_enabled = _language_of(culture) == "en"

    def recognize(self, text: str) -> List[NumberResolution]:
        results: List[NumberResolution] = []
        span: List[str] = []

        for match in TOKEN_PATTERN.finditer(text or ""):
            token = match.group(0)
            lowered = token.lower()

            if self._words_enabled and lowered == "dozen":
                results.append(self._convert_dozen(span))
                span = []
                continue
            if self._words_enabled and lowered in NUMBER_WORDS:
                if span and not _extends(span, lowered):
                    results.append(self._convert_words(span))
                    span = []
                span.append(lowered)
                continue
            if span and lowered == "and":
                span.append(lowered)
                continue

            if span:
                results.append(self._convert_words(span))
                span = []

            if token[-1].isdigit():
                results.append(NumberResolution(text=token, value=_normalize_numeral(token)))

        if span:
            results.append(self._convert_words(span))

        if not results:
            raise RecognitionError(f"No number found in {text!r}")

        return results

    @staticmethod
    def _convert_words(span: List[str]) -> NumberResolution:
        """Convert a run of number words, dropping a dangling 'and'"""
        while span and span[-1] == "and":
            span = span[:-1]
        phrase = " ".join(span)
        try:
            value = w2n.word_to_num(" ".join(word for word in span if word != "and"))
        except ValueError as e:
            raise RecognitionError(f"Could not convert {phrase!r}: {e}") from e
        return NumberResolution(text=phrase, value=str(value))

    @classmethod
    def _convert_dozen(cls, span: List[str]) -> NumberResolution:
        """'a dozen' -> 12, 'two dozen' -> 24"""
        if not span:
            return NumberResolution(text="dozen", value="12")
        count = cls._convert_words(span)
        return NumberResolution(text=f"{count.text} dozen", value=str(int(count.value) * 12))


def _extends(span: List[str], word: str) -> bool:
    """Whether word continues the number already spelled out in span"""
    if word in SCALE_WORDS:
        return True
    previous = next(w for w in reversed(span) if w != "and")
    if previous in SCALE_WORDS:
        return True
    # "twenty five", but not "thirty thirty" or "five six"
    return previous in TENS_WORDS and word in UNIT_WORDS and span[-1] != "and"


def _normalize_numeral(token: str) -> str:
    if THOUSANDS_PATTERN.fullmatch(token):
        return token.replace(",", "")
    return token.replace(",", ".")


# ============================================================================
# Date-Time Recognition
# ============================================================================

SUPPORTED_LANGUAGES = ("en", "sl")

RANGE_PATTERN = re.compile(
    r"\bbetween\s+(?P<between_start>.+?)\s+and\s+(?P<between_end>.+)"
    r"|\bfrom\s+(?P<from_start>.+?)\s+(?:to|until|till)\s+(?P<from_end>.+)",
    re.IGNORECASE,
)
# "5pm", "at 17:30", "noon": a range side that names no day of its own
TIME_ONLY_PATTERN = re.compile(
    r"^(?:at\s+)?(?:\d{1,2}(?::\d{2})?\s*(?:am|pm)|\d{1,2}:\d{2}|noon|midnight)$",
    re.IGNORECASE,
)
# 05.11.2026 is day-first wherever it is written that way
DOTTED_DATE_PATTERN = re.compile(r"\b\d{1,2}\.\d{1,2}\.\d{2,4}\b")


class DateTimeRecognizer:
    """
    Finds date-times and date-time ranges in free text.

    Candidates come in this order: an explicit range ("between X and Y",
    "from X to Y"), then the whole text read as one expression, then any
    expressions embedded in a longer sentence. Relative expressions are
    resolved against the reference time and prefer the future.

    A range side that is only a time of day takes its day from the other
    side, so "between 3pm and 5pm tomorrow" starts tomorrow. Dotted dates
    are read day-first; slashed dates keep dateparser's month-first default.
    """

    def __init__(self, culture: str = "en"):
        self.culture = culture
        self.languages = [_language_of(culture)]

    def recognize(self, text: str, reference: datetime) -> List[DateTimeResolution]:
        settings = {"RELATIVE_BASE": reference, "PREFER_DATES_FROM": "future"}
        text = (text or "").strip()
        if not text:
            return []
        if DOTTED_DATE_PATTERN.search(text):
            settings["DATE_ORDER"] = "DMY"

        try:
            results = self._recognize_range(text, settings)

            if not results:
                whole = dateparser.parse(text, languages=self.languages, settings=settings)
                if whole is not None:
                    results.append(DateTimeResolution(text=text, value=_format(whole)))

            if not results:
                found = search_dates(text, languages=self.languages, settings=settings) or []
                for substring, candidate in found:
                    results.append(DateTimeResolution(text=substring, value=_format(candidate)))
        except Exception as e:
            raise RecognitionError(f"Date recognition failed for {text!r}: {e}") from e

        logger.debug(f"Recognized {len(results)} date-time candidate(s) in {text!r}")
        return results

    def _recognize_range(self, text: str, settings: dict) -> List[DateTimeResolution]:
        match = RANGE_PATTERN.search(text)
        if not match:
            return []

        start_text = (match.group("between_start") or match.group("from_start")).strip()
        end_text = (match.group("between_end") or match.group("from_end")).strip()
        start = dateparser.parse(start_text, languages=self.languages, settings=settings)
        end = dateparser.parse(end_text, languages=self.languages, settings=settings)
        if start is None or end is None:
            return []

        start_is_time = bool(TIME_ONLY_PATTERN.match(start_text))
        end_is_time = bool(TIME_ONLY_PATTERN.match(end_text))
        if start_is_time and not end_is_time:
            start = datetime.combine(end.date(), start.timetz())
        elif end_is_time and not start_is_time:
            end = datetime.combine(start.date(), end.timetz())

        return [DateTimeResolution(text=match.group(0), start=_format(start), end=_format(end))]


def is_supported_culture(culture: str) -> bool:
    """Whether recognizers have a language for this culture tag"""
    return bool(culture) and _language_of(culture) in SUPPORTED_LANGUAGES


def _language_of(culture: str) -> str:
    """'en-US' -> 'en'"""
    return culture.replace("_", "-").split("-")[0].lower()


def _format(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="seconds")
