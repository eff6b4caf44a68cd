"""Pydantic schemas for the interview practice API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from interview_session.models import Session
from services.scoring import average_question_score, completion_percentage


class GenerateReq(BaseModel):
    topic: str
    experienceLevel: str
    difficulty: Optional[str] = None
    numberOfQuestions: Optional[int] = None


class GenerateResp(BaseModel):
    sessionId: str
    questions: List[str]
    topic: str
    experienceLevel: str
    difficulty: str
    numberOfQuestions: int


class SubmitAnswerReq(BaseModel):
    sessionId: str
    questionIndex: int
    answer: str
    timeSpent: Optional[int] = None


class SubmitAnswerResp(BaseModel):
    sessionId: str
    questionIndex: int
    completionPercentage: int
    isCompleted: bool


class QuestionAnswerPayload(BaseModel):
    question: str
    answer: str
    answeredAt: Optional[datetime] = None
    timeSpent: int = 0


class QuestionFeedbackPayload(BaseModel):
    questionIndex: int
    score: float
    feedback: str


class FeedbackPayload(BaseModel):
    overallScore: float
    strengths: List[str]
    improvements: List[str]
    detailedFeedback: str
    questionFeedback: List[QuestionFeedbackPayload]
    generatedAt: datetime


class MetadataPayload(BaseModel):
    aiModel: str
    promptVersion: str
    generationTime: int


class SessionPayload(BaseModel):
    sessionId: str
    topic: str
    experienceLevel: str
    difficulty: str
    numberOfQuestions: int
    questions: List[QuestionAnswerPayload]
    status: str
    feedback: Optional[FeedbackPayload] = None
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    evaluatedAt: Optional[datetime] = None
    totalTimeSpent: int
    metadata: MetadataPayload
    createdAt: datetime
    updatedAt: datetime
    completionPercentage: int
    averageScore: Optional[float] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionPayload":
        feedback = None
        if session.feedback is not None:
            feedback = FeedbackPayload(
                overallScore=session.feedback.overall_score,
                strengths=list(session.feedback.strengths),
                improvements=list(session.feedback.improvements),
                detailedFeedback=session.feedback.detailed_feedback,
                questionFeedback=[
                    QuestionFeedbackPayload(questionIndex=item.question_index, score=item.score, feedback=item.feedback)
                    for item in session.feedback.question_feedback
                ],
                generatedAt=session.feedback.generated_at,
            )
        return cls(
            sessionId=session.id,
            topic=session.topic,
            experienceLevel=session.experience_level,
            difficulty=session.difficulty,
            numberOfQuestions=session.number_of_questions,
            questions=[
                QuestionAnswerPayload(
                    question=item.question,
                    answer=item.answer,
                    answeredAt=item.answered_at,
                    timeSpent=item.time_spent,
                )
                for item in session.questions
            ],
            status=session.status,
            feedback=feedback,
            startedAt=session.started_at,
            completedAt=session.completed_at,
            evaluatedAt=session.evaluated_at,
            totalTimeSpent=session.total_time_spent,
            metadata=MetadataPayload(
                aiModel=session.metadata.ai_model,
                promptVersion=session.metadata.prompt_version,
                generationTime=session.metadata.generation_time,
            ),
            createdAt=session.created_at,
            updatedAt=session.updated_at,
            completionPercentage=completion_percentage(session),
            averageScore=average_question_score(session.feedback),
        )


class DeleteResp(BaseModel):
    sessionId: str
    deleted: bool = True
