"""
Slot validators for the Booking Bot service

Each validator turns raw text into a typed value or a rejection carrying the
message to show the user. None of them raise: recognizer failures come back
as UNPARSEABLE rejections.
"""

import logging
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

from booking_bot.config import BookingConfig
from booking_bot.models import (
    RejectionReason, ValidationError, ValidationResult
)
from booking_bot.prompts import describe_lead, get_prompt
from booking_bot.recognizers import (
    DateTimeRecognizer, NumberRecognizer, RecognitionError
)

logger = logging.getLogger(__name__)


# ============================================================================
# Validation Functions
# ============================================================================

def validate_name(user_input: Optional[str], config: Optional[BookingConfig] = None) -> ValidationResult[str]:
    """
    Validate a name.

    Any non-blank text is a name; it is returned trimmed and otherwise verbatim.

    Args:
        user_input: Raw user text
        config: Booking configuration (prompt language)

    Returns:
        ValidationResult with the trimmed name, or an EMPTY rejection
    """
    config = config or BookingConfig()
    name = (user_input or "").strip()

    if not name:
        return ValidationResult(error=ValidationError(
            RejectionReason.EMPTY,
            get_prompt(config.language, "name_empty"),
        ))

    return ValidationResult(value=name)


def validate_age(
    user_input: Optional[str],
    recognizer: Optional[NumberRecognizer] = None,
    config: Optional[BookingConfig] = None,
) -> ValidationResult[int]:
    """
    Validate an age given as a numeral ("25") or in words ("twenty five").

    Candidates are checked in the order the recognizer returns them; the first
    whole number inside [min_age, max_age] wins.

    Args:
        user_input: Raw user text
        recognizer: Number recognizer (defaults to one for config.culture)
        config: Booking configuration (age range, prompt language)

    Returns:
        ValidationResult with the age, or an OUT_OF_RANGE_OR_UNRECOGNIZED
        or UNPARSEABLE rejection
    """
    config = config or BookingConfig()
    recognizer = recognizer or NumberRecognizer(config.culture)
    limits = {"min_age": config.min_age, "max_age": config.max_age}

    try:
        for resolution in recognizer.recognize(user_input or ""):
            age = int(resolution.value)
            if config.min_age <= age <= config.max_age:
                return ValidationResult(value=age)
    except (RecognitionError, ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Age recognition failed for {user_input!r}: {e}")
        return ValidationResult(error=ValidationError(
            RejectionReason.UNPARSEABLE,
            get_prompt(config.language, "age_unparseable", **limits),
        ))

    return ValidationResult(error=ValidationError(
        RejectionReason.OUT_OF_RANGE_OR_UNRECOGNIZED,
        get_prompt(config.language, "age_out_of_range", **limits),
    ))


def validate_date(
    user_input: Optional[str],
    recognizer: Optional[DateTimeRecognizer] = None,
    config: Optional[BookingConfig] = None,
    now: Optional[datetime] = None,
) -> ValidationResult[str]:
    """
    Validate an appointment date given in natural language or numeric form.

    Accepts "11/14/2026", "tomorrow", "Sunday at 5pm", "between 3pm and 5pm
    tomorrow" and the like. Candidates are checked in the order the recognizer
    returns them; ranges are judged by their start. The first candidate later
    than now + min_lead wins and is returned as a date only.

    Args:
        user_input: Raw user text
        recognizer: Date-time recognizer (defaults to one for config.culture)
        config: Booking configuration (lead time, date format, prompt language)
        now: Current local time (defaults to datetime.now())

    Returns:
        ValidationResult with the formatted date, or a
        TOO_SOON_OR_UNRECOGNIZED or UNPARSEABLE rejection
    """
    config = config or BookingConfig()
    recognizer = recognizer or DateTimeRecognizer(config.culture)
    now = now or datetime.now()
    earliest = now + config.min_lead
    lead = describe_lead(config.language, config.min_lead_minutes)

    try:
        for resolution in recognizer.recognize(user_input or "", now):
            date_string = resolution.value or resolution.start
            if not date_string:
                continue

            candidate = _parse_candidate(date_string)
            if candidate is not None and candidate > earliest:
                return ValidationResult(value=candidate.strftime(config.date_format))
    except (RecognitionError, ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Date recognition failed for {user_input!r}: {e}")
        return ValidationResult(error=ValidationError(
            RejectionReason.UNPARSEABLE,
            get_prompt(config.language, "date_unparseable", lead=lead),
        ))

    return ValidationResult(error=ValidationError(
        RejectionReason.TOO_SOON_OR_UNRECOGNIZED,
        get_prompt(config.language, "date_too_soon", lead=lead),
    ))


# ============================================================================
# Helpers
# ============================================================================

def _parse_candidate(date_string: str) -> Optional[datetime]:
    """
    Parse a resolved date-time string, skipping strings that do not parse.

    Timezone-aware values are converted to local time and made naive so they
    compare against datetime.now().
    """
    try:
        parsed = date_parser.parse(date_string)
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
