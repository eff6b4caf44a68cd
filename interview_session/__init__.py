"""Interview session entity, errors and persistence port."""
from .errors import (
    AIProviderError,
    AlreadyAnswered,
    EvaluationInProgress,
    InterviewError,
    InvalidAIOutput,
    InvalidIndex,
    NotFound,
    NotReadyForEvaluation,
    ValidationError,
)
from .models import (
    COMPLETED,
    CREATED,
    EVALUATED,
    IN_PROGRESS,
    Feedback,
    QuestionAnswer,
    QuestionFeedback,
    Session,
    SessionMetadata,
    SessionParams,
)

__all__ = [
    "AIProviderError",
    "AlreadyAnswered",
    "EvaluationInProgress",
    "InterviewError",
    "InvalidAIOutput",
    "InvalidIndex",
    "NotFound",
    "NotReadyForEvaluation",
    "ValidationError",
    "COMPLETED",
    "CREATED",
    "EVALUATED",
    "IN_PROGRESS",
    "Feedback",
    "QuestionAnswer",
    "QuestionFeedback",
    "Session",
    "SessionMetadata",
    "SessionParams",
]
