"""FastAPI routes for practice interview sessions."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, Header, HTTPException

from agents.evaluation_engine import EvaluationEngine
from agents.question_generator import QuestionGenerator
from api.schemas import (
    DeleteResp,
    GenerateReq,
    GenerateResp,
    SessionPayload,
    SubmitAnswerReq,
    SubmitAnswerResp,
)
from config import EVALUATION_KEY, QUESTION_KEY, get_model, has_model, load_route, settings
from interview_session.errors import AIProviderError, InterviewError, InvalidAIOutput
from interview_session.lifecycle import SessionLifecycle
from llm_gateway import GatewayProvider, TextProvider
from storage.sessions import SqliteSessionRepository


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview")


def _provider(key: str) -> TextProvider:
    if has_model(key):
        return get_model(key)
    return GatewayProvider(load_route(Path(settings.CONFIG_PATH), key))


@lru_cache(maxsize=None)
def _repository(db_path: str) -> SqliteSessionRepository:  # One migrated store per database file
    return SqliteSessionRepository(db_path)


def get_lifecycle() -> SessionLifecycle:
    return SessionLifecycle(
        _repository(settings.DB_PATH),
        QuestionGenerator(_provider(QUESTION_KEY)),
        EvaluationEngine(_provider(EVALUATION_KEY)),
    )


def _http_error(exc: InterviewError) -> HTTPException:
    if isinstance(exc, (AIProviderError, InvalidAIOutput)):
        logger.exception("AI request failed: %s", exc.message)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@router.post("/generate", response_model=GenerateResp, status_code=201)
def generate(
    req: GenerateReq,
    owner_id: str = Header(alias="X-User-Id"),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> GenerateResp:
    params: Dict[str, Any] = {"topic": req.topic, "experience_level": req.experienceLevel}
    if req.difficulty is not None:
        params["difficulty"] = req.difficulty
    if req.numberOfQuestions is not None:
        params["number_of_questions"] = req.numberOfQuestions
    try:
        session = lifecycle.create(owner_id, params)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return GenerateResp(
        sessionId=session.id,
        questions=[item.question for item in session.questions],
        topic=session.topic,
        experienceLevel=session.experience_level,
        difficulty=session.difficulty,
        numberOfQuestions=session.number_of_questions,
    )


@router.post("/submit-answer", response_model=SubmitAnswerResp)
def submit_answer(
    req: SubmitAnswerReq,
    owner_id: str = Header(alias="X-User-Id"),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> SubmitAnswerResp:
    try:
        receipt = lifecycle.record_answer(owner_id, req.sessionId, req.questionIndex, req.answer, req.timeSpent)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return SubmitAnswerResp(
        sessionId=receipt.session_id,
        questionIndex=receipt.question_index,
        completionPercentage=receipt.completion_percentage,
        isCompleted=receipt.is_completed,
    )


@router.get("/summary/{session_id}", response_model=SessionPayload)
def session_summary(
    session_id: str,
    owner_id: str = Header(alias="X-User-Id"),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> SessionPayload:
    try:
        session = lifecycle.evaluate(owner_id, session_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return SessionPayload.from_session(session)


@router.get("/session/{session_id}", response_model=SessionPayload)
def get_session(
    session_id: str,
    owner_id: str = Header(alias="X-User-Id"),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> SessionPayload:
    try:
        session = lifecycle.get(owner_id, session_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return SessionPayload.from_session(session)


@router.delete("/session/{session_id}", response_model=DeleteResp)
def delete_session(
    session_id: str,
    owner_id: str = Header(alias="X-User-Id"),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> DeleteResp:
    try:
        lifecycle.delete(owner_id, session_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return DeleteResp(sessionId=session_id)
