"""Error taxonomy for the interview session lifecycle."""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class InterviewError(Exception):
    """Base error; carries a stable ``code`` and the HTTP status the API maps it to."""

    code = "interview_error"
    status_code = 500

    def __init__(self, message: str, *, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.errors:
            detail["errors"] = self.errors
        return detail


class ValidationError(InterviewError):
    code = "validation_error"
    status_code = 400


class NotFound(InterviewError):
    code = "not_found"
    status_code = 404


class InvalidIndex(InterviewError):
    code = "invalid_index"
    status_code = 400


class AlreadyAnswered(InterviewError):
    code = "already_answered"
    status_code = 409


class NotReadyForEvaluation(InterviewError):
    code = "not_ready_for_evaluation"
    status_code = 400


class EvaluationInProgress(InterviewError):
    """Another caller holds the evaluation lease and has not produced feedback yet."""

    code = "evaluation_in_progress"
    status_code = 409


class AIProviderError(InterviewError):
    """Provider transport, quota or timeout failure. Transient; never retried here."""

    code = "ai_provider_error"
    status_code = 502


class InvalidAIOutput(InterviewError):
    """Provider answered, but the reply could not be parsed into the expected shape."""

    code = "invalid_ai_output"
    status_code = 502


__all__ = [
    "InterviewError",
    "ValidationError",
    "NotFound",
    "InvalidIndex",
    "AlreadyAnswered",
    "NotReadyForEvaluation",
    "EvaluationInProgress",
    "AIProviderError",
    "InvalidAIOutput",
]
