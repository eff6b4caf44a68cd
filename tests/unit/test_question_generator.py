import json
import logging

import pytest

from agents.question_generator import QuestionGenerator
from agents.types import GenerationRequest
from interview_session.errors import AIProviderError, InvalidAIOutput
from llm_gateway import LlmGatewayError, LlmTimeoutError


def _request(count=3):
    return GenerationRequest(topic="React", experience_level="beginner", difficulty="easy", number_of_questions=count)


def test_generates_questions_with_provenance(make_provider):
    provider = make_provider('["Q1", "Q2", "Q3"]')
    result = QuestionGenerator(provider, prompt_version="2.1").generate(_request())

    assert result.questions == ["Q1", "Q2", "Q3"]
    assert result.ai_model == "fake-model"
    assert result.prompt_version == "2.1"
    assert result.generation_time >= 0
    assert provider.calls == 1


def test_prompt_carries_request_fields(make_provider):
    provider = make_provider('["Q1", "Q2", "Q3"]')
    QuestionGenerator(provider).generate(_request())

    prompt = provider.prompts[0]
    assert "Generate 3 interview questions" in prompt
    assert "Topic: React" in prompt
    assert "Experience Level: beginner" in prompt
    assert "Difficulty: easy" in prompt
    assert "JSON array of strings" in prompt


def test_fenced_reply_and_whitespace(make_provider):
    provider = make_provider('```json\n["  What is JSX?  ", "Explain props."]\n```')
    result = QuestionGenerator(provider).generate(_request(2))
    assert result.questions == ["What is JSX?", "Explain props."]


def test_count_drift_is_tolerated_and_logged(make_provider, caplog):
    provider = make_provider('["Q1", "Q2"]')
    with caplog.at_level(logging.WARNING, logger="agents.question_generator"):
        result = QuestionGenerator(provider).generate(_request(3))
    assert result.questions == ["Q1", "Q2"]
    assert "instead of the requested 3" in caplog.text


@pytest.mark.parametrize(
    "reply",
    [
        "Here are some great questions about React!",
        '{"questions": ["Q1"]}',
        '["Q1", 2]',
        '["Q1", "   "]',
        "[]",
        json.dumps([f"Q{i}" for i in range(21)]),
    ],
)
def test_bad_shapes_are_invalid_output(make_provider, reply):
    provider = make_provider(reply)
    with pytest.raises(InvalidAIOutput):
        QuestionGenerator(provider).generate(_request())
    assert provider.calls == 1


@pytest.mark.parametrize("error", [LlmGatewayError("quota exceeded"), LlmTimeoutError("timed out")])
def test_provider_failures_are_provider_errors(make_provider, error):
    provider = make_provider(error)
    with pytest.raises(AIProviderError):
        QuestionGenerator(provider).generate(_request())
    assert provider.calls == 1
