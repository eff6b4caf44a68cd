"""Derived session metrics and score bounding; nothing here is persisted."""
from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Optional, Sequence

from agents.types import EvaluationOutput
from interview_session.errors import InvalidAIOutput
from interview_session.models import Feedback, QuestionAnswer, QuestionFeedback, Session

logger = logging.getLogger(__name__)

OVERALL_RANGE = (0.0, 100.0)
QUESTION_RANGE = (0.0, 10.0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _round1(value: float) -> float:
    """Round a float to one decimal place with stable formatting."""
    return math.floor(value * 10 + 0.5) / 10


def answered_count(questions: Sequence[QuestionAnswer]) -> int:
    return sum(1 for item in questions if item.is_answered)


def completion_percentage(session: Session) -> int:
    """Share of questions with a non-blank answer, as a whole percentage."""

    if not session.questions:
        return 0
    return _round_half_up(100 * answered_count(session.questions) / len(session.questions))


def total_time_spent(questions: Sequence[QuestionAnswer]) -> int:
    return sum(item.time_spent or 0 for item in questions)


def average_question_score(feedback: Optional[Feedback]) -> Optional[float]:
    """Mean per-question score to one decimal, or None without question feedback."""

    if feedback is None or not feedback.question_feedback:
        return None
    scores = [entry.score for entry in feedback.question_feedback]
    return _round1(sum(scores) / len(scores))


def _clamp(value: float, bounds: tuple[float, float], label: str) -> float:
    if math.isnan(value):
        raise InvalidAIOutput(f"AI returned a non-numeric {label}")
    low, high = bounds
    bounded = max(low, min(high, float(value)))
    if bounded != value:
        logger.warning("Clamped out-of-range %s %s to %s", label, value, bounded)
    return bounded


def bound_feedback(output: EvaluationOutput, *, question_count: int, generated_at: dt.datetime) -> Feedback:
    """Turn a raw evaluation reply into stored feedback with scores forced into range.

    Entries pointing at a question index outside the session are dropped.
    """

    entries = []
    for item in output.question_feedback:
        if not 0 <= item.question_index < question_count:
            logger.warning("Dropped feedback for unknown question index %s", item.question_index)
            continue
        entries.append(
            QuestionFeedback(
                question_index=item.question_index,
                score=_clamp(item.score, QUESTION_RANGE, "question score"),
                feedback=item.feedback.strip(),
            )
        )
    return Feedback(
        overall_score=_clamp(output.overall_score, OVERALL_RANGE, "overall score"),
        strengths=[text.strip() for text in output.strengths if text.strip()],
        improvements=[text.strip() for text in output.improvements if text.strip()],
        detailed_feedback=output.detailed_feedback.strip(),
        question_feedback=entries,
        generated_at=generated_at,
    )


__all__ = [
    "answered_count",
    "average_question_score",
    "bound_feedback",
    "completion_percentage",
    "total_time_spent",
]
