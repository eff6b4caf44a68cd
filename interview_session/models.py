"""Session entity and value types for practice interviews."""
from __future__ import annotations

import datetime as dt
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from config.settings import settings

ExperienceLevel = Literal["beginner", "intermediate", "advanced", "expert"]
Difficulty = Literal["easy", "medium", "hard"]
SessionStatus = Literal["created", "in-progress", "completed", "evaluated"]

CREATED: SessionStatus = "created"
IN_PROGRESS: SessionStatus = "in-progress"
COMPLETED: SessionStatus = "completed"
EVALUATED: SessionStatus = "evaluated"

STATUS_ORDER = (CREATED, IN_PROGRESS, COMPLETED, EVALUATED)


def status_rank(status: str) -> int:
    return STATUS_ORDER.index(status)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _lowercase(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class QuestionAnswer(BaseModel):
    question: str
    answer: str = ""
    answered_at: Optional[dt.datetime] = None
    time_spent: int = Field(default=0, ge=0)  # seconds

    @property
    def is_answered(self) -> bool:
        return bool(self.answer.strip())


class QuestionFeedback(BaseModel):
    question_index: int = Field(ge=0)
    score: float = Field(ge=0.0, le=10.0)
    feedback: str


class Feedback(BaseModel):
    overall_score: float = Field(ge=0.0, le=100.0)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    detailed_feedback: str = ""
    question_feedback: List[QuestionFeedback] = Field(default_factory=list)
    generated_at: dt.datetime


class SessionMetadata(BaseModel):
    ai_model: str
    prompt_version: str
    generation_time: int = 0  # milliseconds


class SessionParams(BaseModel):
    """Caller-supplied parameters for a new session, validated before generation."""

    topic: str
    experience_level: ExperienceLevel
    difficulty: Difficulty = "medium"
    number_of_questions: int = Field(default_factory=lambda: settings.DEFAULT_QUESTIONS)

    @field_validator("topic")
    @classmethod
    def _topic_length(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Topic is required")
        if len(value) > settings.MAX_TOPIC_LENGTH:
            raise ValueError(f"Topic cannot exceed {settings.MAX_TOPIC_LENGTH} characters")
        return value

    @field_validator("experience_level", "difficulty", mode="before")
    @classmethod
    def _normalise_choice(cls, value: Any) -> Any:
        return _lowercase(value)

    @field_validator("number_of_questions")
    @classmethod
    def _question_bounds(cls, value: int) -> int:
        if not settings.MIN_QUESTIONS <= value <= settings.MAX_QUESTIONS:
            raise ValueError(
                f"Number of questions must be between {settings.MIN_QUESTIONS} and {settings.MAX_QUESTIONS}"
            )
        return value


class Session(BaseModel):
    id: str
    owner_id: str
    topic: str
    experience_level: ExperienceLevel
    difficulty: Difficulty
    number_of_questions: int
    questions: List[QuestionAnswer]
    status: SessionStatus = CREATED
    feedback: Optional[Feedback] = None
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    evaluated_at: Optional[dt.datetime] = None
    total_time_spent: int = 0  # seconds
    metadata: SessionMetadata
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Session":
        if len(self.questions) != self.number_of_questions:
            raise ValueError("question list length must equal number_of_questions")
        if (self.feedback is not None) != (self.status == EVALUATED):
            raise ValueError("feedback must be present exactly when the session is evaluated")
        return self

    @property
    def all_answered(self) -> bool:
        return all(item.is_answered for item in self.questions)

    @property
    def is_completed(self) -> bool:
        return self.status in (COMPLETED, EVALUATED)


__all__ = [
    "ExperienceLevel",
    "Difficulty",
    "SessionStatus",
    "CREATED",
    "IN_PROGRESS",
    "COMPLETED",
    "EVALUATED",
    "STATUS_ORDER",
    "status_rank",
    "utc_now",
    "QuestionAnswer",
    "QuestionFeedback",
    "Feedback",
    "SessionMetadata",
    "SessionParams",
    "Session",
]
