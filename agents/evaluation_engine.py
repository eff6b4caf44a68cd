"""LLM-backed evaluation of a completed interview session."""
from __future__ import annotations

import logging
from textwrap import dedent
from typing import Any, Dict, Optional

from pydantic import ValidationError

from agents.response_parser import ParseError, extract_json
from agents.types import EvaluationOutput, EvaluationRequest
from interview_session.errors import AIProviderError, InvalidAIOutput
from llm_gateway import LlmGatewayError, TextProvider
from observability import span

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"
REQUIRED_KEYS = ("overallScore", "strengths", "improvements", "questionFeedback")


class EvaluationEngine:  # Stateless wrapper around the evaluation prompt
    def __init__(self, provider: TextProvider) -> None:
        self._provider = provider

    @property
    def timeout_s(self) -> Optional[float]:
        """Per-phase timeout of the underlying provider, when it declares one."""
        return getattr(self._provider, "timeout_s", None)

    def evaluate(self, request: EvaluationRequest) -> EvaluationOutput:
        task = _build_task(request)
        try:
            with span("interview_evaluation"):
                raw = self._provider.generate_text(task)
        except LlmGatewayError as exc:
            logger.error("Evaluation provider failure topic=%s: %s", request.topic, exc)
            raise AIProviderError("Failed to evaluate interview responses") from exc
        logger.debug("Raw evaluation reply: %.500s", raw)
        return _parse_evaluation(raw)


def _parse_evaluation(raw: Any) -> EvaluationOutput:
    try:
        value = extract_json(raw)
    except ParseError as exc:
        logger.error("Evaluation reply was not JSON: %s", exc)
        raise InvalidAIOutput("Failed to parse AI evaluation response") from exc
    if not isinstance(value, dict):
        raise InvalidAIOutput("Invalid evaluation format received from AI")
    missing = [key for key in REQUIRED_KEYS if value.get(key) is None]
    if missing:
        raise InvalidAIOutput(f"Invalid evaluation format received from AI: missing {', '.join(missing)}")
    payload: Dict[str, Any] = dict(value)
    if payload.get("detailedFeedback") is None:
        payload["detailedFeedback"] = ""
    try:
        return EvaluationOutput.model_validate(payload)
    except ValidationError as exc:
        logger.error("Evaluation reply failed shape validation: %s", exc)
        raise InvalidAIOutput("Invalid evaluation format received from AI") from exc


def _format_pairs(request: EvaluationRequest) -> str:
    blocks = []
    for index, pair in enumerate(request.questions):
        answer = pair.answer.strip() or NO_ANSWER
        blocks.append(f"Question {index + 1}: {pair.question}\nAnswer: {answer}")
    return "\n\n".join(blocks)


def _build_task(request: EvaluationRequest) -> str:  # Compose evaluation prompt
    qa_block = _format_pairs(request)
    header = dedent(
        f"""
        You are an expert technical interviewer evaluating an interview session. Please provide a comprehensive evaluation based on the following:

        Topic: {request.topic}
        Experience Level: {request.experience_level}

        Questions and Answers:
        """
    ).strip()
    contract = dedent(
        """
        Please provide your evaluation in the following JSON format ONLY. Do not include any other text, formatting, or markdown.
        {
          "overallScore": <number between 0-100>,
          "strengths": ["strength1", "strength2"],
          "improvements": ["improvement1", "improvement2"],
          "detailedFeedback": "Detailed paragraph explaining the overall performance.",
          "questionFeedback": [
            {
              "questionIndex": 0,
              "score": <number between 0-10>,
              "feedback": "Specific feedback for this question."
            }
          ]
        }
        Use zero-based questionIndex values and include one entry per question.

        Evaluation Criteria:
        - Technical accuracy and depth of knowledge.
        - Clarity and structure of the communication.
        - Problem-solving approach.
        - Relevance of the answer to the experience level.
        """
    ).strip()
    return f"{header}\n{qa_block}\n\n{contract}"


__all__ = ["EvaluationEngine", "NO_ANSWER"]
