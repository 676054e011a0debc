"""
Configuration for the Booking Bot service

Covers the slot rules (age range, booking lead time, date output format), the
recognizer culture and prompt language, and the Redis persistence used by the
hosting service.
"""

import os
import logging
from dataclasses import dataclass
from datetime import timedelta

from booking_bot.prompts import PROMPTS
from booking_bot.recognizers import SUPPORTED_LANGUAGES, is_supported_culture

logger = logging.getLogger(__name__)


@dataclass
class BookingConfig:
    """
    Configuration for the booking flow.

    Attributes:
        culture: Recognizer culture tag (default: en)
        language: Prompt catalog language (default: en)
        min_age: Lowest accepted age, inclusive (default: 18)
        max_age: Highest accepted age, inclusive (default: 120)
        min_lead_minutes: How far in the future a booking must be (default: 60)
        date_format: strftime format for the booked date (default: %d/%m/%Y)
        redis_url: Redis connection URL (default: redis://localhost:6379)
        session_ttl: Flow/profile TTL in seconds (default: 86400 = 24h)
        log_state_transitions: Log flow transitions (default: True)
    """

    culture: str = "en"
    language: str = "en"
    min_age: int = 18
    max_age: int = 120
    min_lead_minutes: int = 60
    date_format: str = "%d/%m/%Y"
    redis_url: str = "redis://localhost:6379"
    session_ttl: int = 86400
    log_state_transitions: bool = True

    def __post_init__(self):
        """Validate configuration after initialization"""
        if self.min_age < 0 or self.min_age > self.max_age:
            raise ValueError(
                f"age range must satisfy 0 <= min_age <= max_age, got [{self.min_age}, {self.max_age}]"
            )

        if self.min_lead_minutes < 0:
            raise ValueError(
                f"min_lead_minutes must not be negative, got {self.min_lead_minutes}"
            )

        if not is_supported_culture(self.culture):
            raise ValueError(
                f"culture must be a {', '.join(SUPPORTED_LANGUAGES)} culture tag, got {self.culture}"
            )

        if self.language not in PROMPTS:
            raise ValueError(
                f"language must be one of {sorted(PROMPTS)}, got {self.language}"
            )

        if self.session_ttl <= 0:
            raise ValueError(
                f"session_ttl must be positive, got {self.session_ttl}"
            )

        if not self.redis_url.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(
                f"redis_url must start with redis://, rediss://, or unix://, got {self.redis_url}"
            )

    @property
    def min_lead(self) -> timedelta:
        """Minimum distance between now and an accepted booking."""
        return timedelta(minutes=self.min_lead_minutes)

    @staticmethod
    def from_env() -> "BookingConfig":
        """
        Load configuration from environment variables.

        Environment Variables:
            BOOKING_REDIS_HOST: Redis host (default: localhost)
            BOOKING_REDIS_PORT: Redis port (default: 6379)
            BOOKING_REDIS_DB: Redis database (default: 0)
            BOOKING_SESSION_TTL: Flow/profile TTL in seconds (default: 86400)
            BOOKING_CULTURE: Recognizer culture (default: en)
            BOOKING_LANGUAGE: Prompt language (default: en)
            BOOKING_MIN_AGE: Lowest accepted age (default: 18)
            BOOKING_MAX_AGE: Highest accepted age (default: 120)
            BOOKING_MIN_LEAD_MINUTES: Booking lead time in minutes (default: 60)
            BOOKING_DATE_FORMAT: Booked date format (default: %d/%m/%Y)
            BOOKING_LOG_STATE_TRANSITIONS: Log flow transitions (default: true)

        Returns:
            BookingConfig instance loaded from environment
        """
        redis_host = os.getenv("BOOKING_REDIS_HOST", "localhost")
        redis_port = _int_from_env("BOOKING_REDIS_PORT", 6379)
        redis_db = _int_from_env("BOOKING_REDIS_DB", 0)
        redis_url = f"redis://{redis_host}:{redis_port}/{redis_db}"

        log_state_transitions = os.getenv(
            "BOOKING_LOG_STATE_TRANSITIONS", "true"
        ).lower() in ("true", "1", "yes")

        config = BookingConfig(
            culture=os.getenv("BOOKING_CULTURE", "en"),
            language=os.getenv("BOOKING_LANGUAGE", "en"),
            min_age=_int_from_env("BOOKING_MIN_AGE", 18),
            max_age=_int_from_env("BOOKING_MAX_AGE", 120),
            min_lead_minutes=_int_from_env("BOOKING_MIN_LEAD_MINUTES", 60),
            date_format=os.getenv("BOOKING_DATE_FORMAT", "%d/%m/%Y"),
            redis_url=redis_url,
            session_ttl=_int_from_env("BOOKING_SESSION_TTL", 86400),
            log_state_transitions=log_state_transitions,
        )

        logger.info(
            f" BookingConfig loaded: redis_url={config.redis_url}, "
            f"session_ttl={config.session_ttl}s, language={config.language}, "
            f"age_range=[{config.min_age}, {config.max_age}], lead={config.min_lead_minutes}min"
        )
        return config


def _int_from_env(name: str, default: int) -> int:
    """Read an integer variable, falling back to the default when malformed"""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        logger.warning(f"Invalid {name}, using default {default}")
        return default
