"""LLM-backed interview question generator."""
from __future__ import annotations

import logging
from textwrap import dedent
from typing import Any, List, Optional

from agents.response_parser import ParseError, extract_json
from agents.types import GeneratedQuestions, GenerationRequest
from config.settings import settings
from interview_session.errors import AIProviderError, InvalidAIOutput
from llm_gateway import LlmGatewayError, TextProvider
from observability import span

logger = logging.getLogger(__name__)


class QuestionGenerator:  # Single-attempt question generation against one provider
    def __init__(self, provider: TextProvider, *, prompt_version: Optional[str] = None) -> None:
        self._provider = provider
        self._prompt_version = prompt_version or settings.PROMPT_VERSION

    def generate(self, request: GenerationRequest) -> GeneratedQuestions:
        task = _build_task(request)
        try:
            with span("question_generation") as timing:
                raw = self._provider.generate_text(task)
        except LlmGatewayError as exc:
            logger.error("Question generation provider failure topic=%s: %s", request.topic, exc)
            raise AIProviderError("Failed to generate interview questions") from exc
        logger.debug("Raw question generation reply: %.500s", raw)

        questions = _parse_questions(raw)
        if len(questions) != request.number_of_questions:
            logger.warning(
                "Provider generated %d questions instead of the requested %d; proceeding with %d",
                len(questions),
                request.number_of_questions,
                len(questions),
            )
        return GeneratedQuestions(
            questions=questions,
            ai_model=str(getattr(self._provider, "model", "unknown")),
            prompt_version=self._prompt_version,
            generation_time=timing.ms,
        )


def _parse_questions(raw: Any) -> List[str]:
    try:
        value = extract_json(raw)
    except ParseError as exc:
        logger.error("Question generation reply was not JSON: %s", exc)
        raise InvalidAIOutput("AI returned a response in an invalid format") from exc
    if not isinstance(value, list):
        raise InvalidAIOutput("AI did not return an array of questions")
    questions: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise InvalidAIOutput("AI returned a question that is not a non-empty string")
        questions.append(item.strip())
    if not questions:
        raise InvalidAIOutput("AI returned no questions")
    if len(questions) > settings.MAX_QUESTIONS:
        raise InvalidAIOutput(
            f"AI returned {len(questions)} questions; at most {settings.MAX_QUESTIONS} are allowed"
        )
    return questions


def _build_task(request: GenerationRequest) -> str:  # Compose generation prompt
    return dedent(
        f"""
        You are an expert technical interviewer. Generate {request.number_of_questions} interview questions for the following specifications:

        Topic: {request.topic}
        Experience Level: {request.experience_level}
        Difficulty: {request.difficulty}

        Requirements:
        - Questions should be appropriate for the specified experience level and difficulty.
        - Include a mix of theoretical and practical questions.
        - Questions should be clear and specific.

        Please return ONLY a JSON array of strings, where each string is a question. Do not include any other text, formatting, or markdown.

        Example format:
        ["Question 1 here", "Question 2 here", "Question 3 here"]
        """
    ).strip()


__all__ = ["QuestionGenerator"]
