"""Input and output shapes for the question generator and evaluation engine."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from interview_session.models import Difficulty, ExperienceLevel


class GenerationRequest(BaseModel):
    topic: str
    experience_level: ExperienceLevel
    difficulty: Difficulty
    number_of_questions: int


class GeneratedQuestions(BaseModel):
    questions: List[str]
    ai_model: str
    prompt_version: str
    generation_time: int  # milliseconds


class QAPair(BaseModel):
    question: str
    answer: str = ""


class EvaluationRequest(BaseModel):
    topic: str
    experience_level: ExperienceLevel
    questions: List[QAPair]


class QuestionFeedbackOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_index: int = Field(alias="questionIndex")
    score: float
    feedback: str


class EvaluationOutput(BaseModel):
    """Evaluation reply as the provider emits it (camelCase keys); scores are unbounded here."""

    model_config = ConfigDict(populate_by_name=True)

    overall_score: float = Field(alias="overallScore")
    strengths: List[str]
    improvements: List[str]
    detailed_feedback: str = Field(default="", alias="detailedFeedback")
    question_feedback: List[QuestionFeedbackOut] = Field(alias="questionFeedback")
