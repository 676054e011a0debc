"""
Flow Manager for the Booking Bot service

Contains the state machine that drives the booking conversation:

    NONE -> NAME -> AGE -> DATE -> NONE

Each call to advance() takes the current flow state, the current profile and
one line of user input, and returns the messages to send plus the new flow
state and profile. Inputs are never mutated, so the caller decides when and
where to persist the results.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from booking_bot.config import BookingConfig
from booking_bot.models import ConversationFlow, Question, TurnResult, UserProfile
from booking_bot.prompts import get_prompt
from booking_bot.recognizers import DateTimeRecognizer, NumberRecognizer
from booking_bot.validation import validate_age, validate_date, validate_name

logger = logging.getLogger(__name__)


class BookingFlowManager:
    """
    State machine for the name / age / date booking conversation.

    Holds only configuration and collaborators; all conversation state is
    passed in and returned, so one manager can serve any number of
    conversations.
    """

    def __init__(
        self,
        config: BookingConfig,
        number_recognizer: Optional[NumberRecognizer] = None,
        datetime_recognizer: Optional[DateTimeRecognizer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the booking flow manager.

        Args:
            config: Booking configuration
            number_recognizer: Recognizer used for ages
            datetime_recognizer: Recognizer used for dates
            clock: Returns the current local time
        """
        self.config = config
        self.number_recognizer = number_recognizer or NumberRecognizer(config.culture)
        self.datetime_recognizer = datetime_recognizer or DateTimeRecognizer(config.culture)
        self.clock = clock

    def advance(
        self,
        flow: ConversationFlow,
        profile: UserProfile,
        user_input: Optional[str],
    ) -> TurnResult:
        """
        Process one turn of user input based on the question last asked.

        Args:
            flow: Flow state restored by the caller
            profile: Profile restored by the caller
            user_input: User's typed input (ignored when nothing was asked yet)

        Returns:
            TurnResult with outgoing messages, updated flow state and profile
        """
        flow = replace(flow)
        profile = replace(profile)
        user_input = (user_input or "").strip()
        previous = flow.last_question_asked

        if previous == Question.NONE:
            result = self._handle_none(flow, profile)
        elif previous == Question.NAME:
            result = self._handle_name(flow, profile, user_input)
        elif previous == Question.AGE:
            result = self._handle_age(flow, profile, user_input)
        elif previous == Question.DATE:
            result = self._handle_date(flow, profile, user_input)
        else:
            raise ValueError(f"Unknown question state: {previous}")

        if self.config.log_state_transitions:
            logger.debug(
                f"Flow {previous.value} -> {result.flow.last_question_asked.value}"
                + (f" (rejected: {result.error.reason.value})" if result.error else "")
            )

        return result

    # ========================================================================
    # State Handler Methods
    # ========================================================================

    def _handle_none(self, flow: ConversationFlow, profile: UserProfile) -> TurnResult:
        """Greet and ask for the name"""
        flow.last_question_asked = Question.NAME
        return TurnResult(
            messages=[self._prompt("greeting")],
            flow=flow,
            profile=profile,
            previous_question=Question.NONE,
        )

    def _handle_name(self, flow: ConversationFlow, profile: UserProfile, user_input: str) -> TurnResult:
        """Collect the name, then ask for the age"""
        result = validate_name(user_input, self.config)

        if not result.is_valid:
            return self._reject(flow, profile, result.error)

        profile.name = result.value
        flow.last_question_asked = Question.AGE
        return TurnResult(
            messages=[
                self._prompt("name_ack", name=profile.name),
                self._prompt("ask_age"),
            ],
            flow=flow,
            profile=profile,
            previous_question=Question.NAME,
        )

    def _handle_age(self, flow: ConversationFlow, profile: UserProfile, user_input: str) -> TurnResult:
        """Collect the age, then ask for the date"""
        result = validate_age(user_input, self.number_recognizer, self.config)

        if not result.is_valid:
            return self._reject(flow, profile, result.error)

        profile.age = result.value
        flow.last_question_asked = Question.DATE
        return TurnResult(
            messages=[
                self._prompt("age_ack", name=profile.name, age=profile.age),
                self._prompt("ask_date"),
            ],
            flow=flow,
            profile=profile,
            previous_question=Question.AGE,
        )

    def _handle_date(self, flow: ConversationFlow, profile: UserProfile, user_input: str) -> TurnResult:
        """Collect the date, confirm the booking and start over"""
        result = validate_date(
            user_input, self.datetime_recognizer, self.config, now=self.clock()
        )

        if not result.is_valid:
            return self._reject(flow, profile, result.error)

        profile.date = result.value
        messages: List[str] = [
            self._prompt("booked", date=profile.date),
            self._prompt("thanks", name=profile.name),
            self._prompt("book_again"),
        ]

        flow.last_question_asked = Question.NONE
        return TurnResult(
            messages=messages,
            flow=flow,
            profile=UserProfile(),
            previous_question=Question.DATE,
            completed=True,
            booking=profile,
        )

    # ========================================================================
    # Helpers
    # ========================================================================

    def _reject(self, flow: ConversationFlow, profile: UserProfile, error) -> TurnResult:
        """Re-ask the same question with the validator's message"""
        message = error.message if error and error.message else self._prompt("fallback")
        return TurnResult(
            messages=[message],
            flow=flow,
            profile=profile,
            previous_question=flow.last_question_asked,
            error=error,
        )

    def _prompt(self, key: str, **kwargs) -> str:
        return get_prompt(self.config.language, key, **kwargs)


def advance(flow: ConversationFlow, profile: UserProfile, user_input: Optional[str]) -> TurnResult:
    """Run one turn with the default configuration and recognizers"""
    return BookingFlowManager(BookingConfig()).advance(flow, profile, user_input)
