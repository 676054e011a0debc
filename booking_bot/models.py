"""
Data models for the Booking Bot service

Contains enums, dataclasses, and Pydantic models for the booking conversation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field


# ============================================================================
# Enums
# ============================================================================

class Question(Enum):
    """Which question was last asked in a conversation"""
    NONE = "none"
    NAME = "name"
    AGE = "age"
    DATE = "date"


class RejectionReason(Enum):
    """Why a slot validator refused an answer"""
    EMPTY = "empty"
    OUT_OF_RANGE_OR_UNRECOGNIZED = "out_of_range_or_unrecognized"
    TOO_SOON_OR_UNRECOGNIZED = "too_soon_or_unrecognized"
    UNPARSEABLE = "unparseable"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class ConversationFlow:
    """Flow state for one conversation"""
    last_question_asked: Question = Question.NONE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {"last_question_asked": self.last_question_asked.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationFlow":
        """Restore from a stored dictionary; unknown states raise ValueError"""
        return cls(
            last_question_asked=Question(data.get("last_question_asked", Question.NONE.value))
        )


@dataclass
class UserProfile:
    """Values collected from one conversation participant"""
    name: Optional[str] = None
    age: Optional[int] = None
    date: Optional[str] = None  # Booked calendar date, already formatted

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            "name": self.name,
            "age": self.age,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """Restore from a stored dictionary"""
        return cls(
            name=data.get("name"),
            age=data.get("age"),
            date=data.get("date"),
        )


@dataclass(frozen=True)
class ValidationError:
    """A rejected answer: machine-readable reason plus the message to show"""
    reason: RejectionReason
    message: str


T = TypeVar("T")


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of a slot validator: a value on success, an error otherwise"""
    value: Optional[T] = None
    error: Optional[ValidationError] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass
class TurnResult:
    """Everything one call to the flow manager produces"""
    messages: List[str]
    flow: ConversationFlow
    profile: UserProfile
    previous_question: Question
    completed: bool = False
    booking: Optional[UserProfile] = None  # Filled profile of a completed cycle
    error: Optional[ValidationError] = None


@dataclass
class NumberResolution:
    """One number recognized in free text"""
    text: str
    value: str


@dataclass
class DateTimeResolution:
    """One date-time recognized in free text: a single value or a start/end range"""
    text: str
    value: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_range(self) -> bool:
        return self.value is None and self.start is not None


# ============================================================================
# Pydantic Models for API
# ============================================================================

class ProfileModel(BaseModel):
    """Collected profile values"""
    name: Optional[str] = Field(None, description="Participant name")
    age: Optional[int] = Field(None, description="Participant age")
    date: Optional[str] = Field(None, description="Booked appointment date")


class TurnRequest(BaseModel):
    """Request model for one inbound message"""
    user_id: str = Field(..., min_length=1, description="Identity the profile is stored under")
    text: str = Field("", description="User's typed input")


class TurnResponse(BaseModel):
    """Response model for one processed turn"""
    messages: List[str] = Field(..., description="Ordered messages to send back")
    state: str = Field(..., description="Question now pending an answer")
    previous_state: str = Field(..., description="Question that was pending before this turn")
    profile: ProfileModel = Field(..., description="Profile after this turn")
    completed: bool = Field(..., description="Whether this turn completed a booking")
    booking: Optional[ProfileModel] = Field(None, description="Booked profile if completed")
    error: Optional[str] = Field(None, description="Rejection reason if the answer was refused")
    success: bool = Field(..., description="Whether the answer was accepted")


class ConversationStatusResponse(BaseModel):
    """Response model for conversation status query"""
    conversation_id: str = Field(..., description="Conversation identifier")
    user_id: str = Field(..., description="User identifier")
    state: str = Field(..., description="Question now pending an answer")
    profile: ProfileModel = Field(..., description="Collected profile values")
    expires_in_seconds: Optional[int] = Field(None, description="Seconds until the flow state expires")


class HealthResponse(BaseModel):
    """Response model for health check"""
    status: str = Field(..., description="Service status: healthy/degraded/unhealthy")
    redis_connected: bool = Field(..., description="Redis connectivity status")
    config_valid: bool = Field(..., description="Configuration validation status")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")


class MetricsResponse(BaseModel):
    """Response model for metrics endpoint"""
    total_turns: int = Field(..., description="Total turns processed")
    conversations_started: int = Field(..., description="Greetings sent")
    completed_bookings: int = Field(..., description="Cycles that reached a booking")
    rejected_inputs: int = Field(..., description="Answers refused by a validator")
    active_conversations_count: int = Field(..., description="Flow states currently stored")


class AdminClearSessionsResponse(BaseModel):
    """Response model for clearing sessions"""
    sessions_deleted: int = Field(..., description="Number of keys deleted")
    message: str = Field(..., description="Operation result message")
