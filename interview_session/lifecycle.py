"""Session state machine: create, record answers, evaluate.

Status only moves forward through ``created -> in-progress -> completed ->
evaluated``. Every write goes through a compare-and-set on the repository, so a
duplicate or concurrent request either loses cleanly or observes the winner's
result; nothing here relies on a read-then-write held in process memory.
"""
from __future__ import annotations

import datetime as dt
import time
import uuid
from typing import Any, Callable, Mapping, Optional

import pydantic
from pydantic import BaseModel

from agents.evaluation_engine import EvaluationEngine
from agents.question_generator import QuestionGenerator
from agents.types import EvaluationRequest, GenerationRequest, QAPair
from config.settings import settings
from observability import log_event, span
from services.scoring import bound_feedback, completion_percentage, total_time_spent

from .errors import (
    AlreadyAnswered,
    EvaluationInProgress,
    InterviewError,
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
    QuestionAnswer,
    Session,
    SessionMetadata,
    SessionParams,
    status_rank,
    utc_now,
)
from .ports import SessionRepository


HTTP_TIMEOUT_PHASES = 4


class AnswerReceipt(BaseModel):
    session_id: str
    question_index: int
    completion_percentage: int
    is_completed: bool


def _validation_errors(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]


class SessionLifecycle:
    def __init__(
        self,
        repository: SessionRepository,
        question_generator: QuestionGenerator,
        evaluation_engine: EvaluationEngine,
        *,
        clock: Callable[[], dt.datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
        lease_seconds: Optional[float] = None,
        wait_seconds: Optional[float] = None,
        poll_seconds: Optional[float] = None,
    ) -> None:
        self._repository = repository
        self._generator = question_generator
        self._engine = evaluation_engine
        self._clock = clock
        self._sleep = sleep
        call_budget = _provider_call_budget(evaluation_engine.timeout_s)
        lease = settings.EVALUATION_LEASE_SECONDS if lease_seconds is None else lease_seconds
        wait = settings.EVALUATION_WAIT_SECONDS if wait_seconds is None else wait_seconds
        # Lease and wait both cover the slowest possible provider call.
        self._lease_seconds = max(lease, call_budget)
        self._wait_seconds = max(wait, call_budget)
        self._poll_seconds = settings.EVALUATION_POLL_SECONDS if poll_seconds is None else poll_seconds

    # ------------------------------------------------------------------ reads

    def get(self, owner_id: str, session_id: str) -> Session:
        session = self._repository.get(session_id, owner_id)
        if session is None:
            raise NotFound("Interview session not found")
        return session

    # ----------------------------------------------------------------- create

    def create(self, owner_id: str, params: Mapping[str, Any] | SessionParams) -> Session:
        """Generate questions and persist a new session in ``created``.

        Generator failures propagate and nothing is stored.
        """

        if isinstance(params, SessionParams):
            validated = params
        else:
            try:
                validated = SessionParams.model_validate(dict(params))
            except pydantic.ValidationError as exc:
                raise ValidationError("Validation failed", errors=_validation_errors(exc)) from exc

        generated = self._generator.generate(
            GenerationRequest(
                topic=validated.topic,
                experience_level=validated.experience_level,
                difficulty=validated.difficulty,
                number_of_questions=validated.number_of_questions,
            )
        )
        now = self._clock()
        session = Session(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            topic=validated.topic,
            experience_level=validated.experience_level,
            difficulty=validated.difficulty,
            number_of_questions=len(generated.questions),
            questions=[QuestionAnswer(question=text) for text in generated.questions],
            status=CREATED,
            metadata=SessionMetadata(
                ai_model=generated.ai_model,
                prompt_version=generated.prompt_version,
                generation_time=generated.generation_time,
            ),
            created_at=now,
            updated_at=now,
        )
        self._repository.insert(session)
        log_event(
            "session_created",
            session.id,
            owner_id=owner_id,
            status=session.status,
            ms=generated.generation_time,
            requested=validated.number_of_questions,
            generated=len(generated.questions),
        )
        return session

    # ---------------------------------------------------------- record answer

    def record_answer(
        self,
        owner_id: str,
        session_id: str,
        index: int,
        answer_text: str,
        time_spent: Optional[int] = None,
    ) -> AnswerReceipt:
        answer = _clean_answer(answer_text)
        seconds = _clean_time_spent(time_spent)

        session = self.get(owner_id, session_id)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(session.questions):
            raise InvalidIndex("Invalid question index")
        if session.questions[index].is_answered:
            raise AlreadyAnswered("Question already answered")

        now = self._clock()
        applied = self._repository.set_answer_if_empty(
            session_id,
            owner_id,
            index,
            answer=answer,
            answered_at=now,
            time_spent=seconds,
        )
        if not applied:
            if self._repository.get(session_id, owner_id) is None:
                raise NotFound("Interview session not found")
            raise AlreadyAnswered("Question already answered")
        log_event("answer_recorded", session_id, owner_id=owner_id, question_index=index, seconds=seconds)

        if self._repository.advance_status(session_id, owner_id, expected=CREATED, target=IN_PROGRESS, at=now):
            log_event("session_started", session_id, owner_id=owner_id, status=IN_PROGRESS)

        session = self.get(owner_id, session_id)
        if session.all_answered and session.status == IN_PROGRESS:
            total = total_time_spent(session.questions)
            if self._repository.advance_status(
                session_id,
                owner_id,
                expected=IN_PROGRESS,
                target=COMPLETED,
                at=now,
                total_time_spent=total,
            ):
                log_event("session_completed", session_id, owner_id=owner_id, status=COMPLETED, seconds=total)
            session = self.get(owner_id, session_id)

        return AnswerReceipt(
            session_id=session_id,
            question_index=index,
            completion_percentage=completion_percentage(session),
            is_completed=session.is_completed,
        )

    # --------------------------------------------------------------- evaluate

    def evaluate(self, owner_id: str, session_id: str) -> Session:
        """Attach feedback exactly once and return the evaluated session.

        An already evaluated session is returned as stored. Concurrent callers
        race for a lease; only the holder calls the provider and the others wait
        for its result.
        """

        session = self.get(owner_id, session_id)
        if session.status == EVALUATED:
            return session
        if status_rank(session.status) < status_rank(COMPLETED):
            raise NotReadyForEvaluation("Interview session is not completed yet")

        token = uuid.uuid4().hex
        now = self._clock()
        expires_at = now + dt.timedelta(seconds=self._lease_seconds)
        if not self._repository.claim_evaluation(session_id, owner_id, token=token, now=now, expires_at=expires_at):
            return self._await_evaluation(owner_id, session_id)
        log_event("evaluation_claimed", session_id, owner_id=owner_id, status=COMPLETED)

        try:
            with span("session_evaluation", session_id):
                output = self._engine.evaluate(
                    EvaluationRequest(
                        topic=session.topic,
                        experience_level=session.experience_level,
                        questions=[QAPair(question=item.question, answer=item.answer) for item in session.questions],
                    )
                )
            evaluated_at = self._clock()
            feedback = bound_feedback(output, question_count=len(session.questions), generated_at=evaluated_at)
        except Exception as exc:
            self._repository.release_evaluation(session_id, owner_id, token=token)
            code = exc.code if isinstance(exc, InterviewError) else type(exc).__name__
            log_event("evaluation_failed", session_id, owner_id=owner_id, status=COMPLETED, error=code)
            raise

        if not self._repository.store_feedback(session_id, owner_id, token=token, feedback=feedback, at=evaluated_at):
            # Lease expired and another caller took over; report whatever it settled on.
            return self._await_evaluation(owner_id, session_id)
        log_event("session_evaluated", session_id, owner_id=owner_id, status=EVALUATED, score=feedback.overall_score)
        return self.get(owner_id, session_id)

    def _await_evaluation(self, owner_id: str, session_id: str) -> Session:
        waited = 0.0
        while True:
            session = self.get(owner_id, session_id)
            if session.status == EVALUATED:
                log_event("evaluation_waited", session_id, owner_id=owner_id, status=EVALUATED, ms=int(waited * 1000))
                return session
            if not self._repository.evaluation_claimed(session_id, owner_id, now=self._clock()):
                raise EvaluationInProgress("Evaluation attempt did not finish; please try again")
            if waited >= self._wait_seconds:
                raise EvaluationInProgress("Evaluation is still in progress; please try again shortly")
            self._sleep(self._poll_seconds)
            waited += self._poll_seconds

    # ----------------------------------------------------------------- delete

    def delete(self, owner_id: str, session_id: str) -> None:
        if not self._repository.delete(session_id, owner_id):
            raise NotFound("Interview session not found")
        log_event("session_deleted", session_id, owner_id=owner_id)


def _provider_call_budget(timeout_s: Optional[float]) -> float:
    """Worst-case wall time of one provider call, or 0 when the provider declares no timeout.

    httpx applies the timeout to each phase (pool, connect, write, read) separately.
    """

    if timeout_s is None:
        return 0.0
    return timeout_s * HTTP_TIMEOUT_PHASES + settings.EVALUATION_LEASE_MARGIN_SECONDS


def _clean_answer(answer_text: Any) -> str:
    if not isinstance(answer_text, str):
        raise ValidationError("Answer must be text")
    answer = answer_text.strip()
    if not answer:
        raise ValidationError("Answer must not be empty")
    if len(answer) > settings.MAX_ANSWER_LENGTH:
        raise ValidationError(f"Answer cannot exceed {settings.MAX_ANSWER_LENGTH} characters")
    return answer


def _clean_time_spent(time_spent: Optional[int]) -> int:
    if time_spent is None:
        return 0
    if isinstance(time_spent, bool) or not isinstance(time_spent, int) or time_spent < 0:
        raise ValidationError("Time spent must be a non-negative integer")
    return time_spent


__all__ = ["AnswerReceipt", "SessionLifecycle"]
