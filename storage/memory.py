"""In-process session repository; compare-and-set under a single lock."""
from __future__ import annotations

import datetime as dt
import threading
from typing import Dict, Optional, Tuple

from interview_session.models import COMPLETED, EVALUATED, IN_PROGRESS, Feedback, Session, SessionStatus


class InMemorySessionRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._leases: Dict[str, Tuple[str, dt.datetime]] = {}

    def _owned(self, session_id: str, owner_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            return None
        return session

    def insert(self, session: Session) -> None:
        with self._lock:
            if session.id in self._sessions:
                raise KeyError(f"session already exists: {session.id}")
            self._sessions[session.id] = session.model_copy(deep=True)

    def get(self, session_id: str, owner_id: str) -> Optional[Session]:
        with self._lock:
            session = self._owned(session_id, owner_id)
            return session.model_copy(deep=True) if session else None

    def set_answer_if_empty(
        self,
        session_id: str,
        owner_id: str,
        index: int,
        *,
        answer: str,
        answered_at: dt.datetime,
        time_spent: int,
    ) -> bool:
        with self._lock:
            session = self._owned(session_id, owner_id)
            if session is None or not 0 <= index < len(session.questions):
                return False
            slot = session.questions[index]
            if slot.is_answered:
                return False
            slot.answer = answer
            slot.answered_at = answered_at
            slot.time_spent = time_spent
            session.updated_at = answered_at
            return True

    def advance_status(
        self,
        session_id: str,
        owner_id: str,
        *,
        expected: SessionStatus,
        target: SessionStatus,
        at: dt.datetime,
        total_time_spent: Optional[int] = None,
    ) -> bool:
        if target not in (IN_PROGRESS, COMPLETED):
            raise ValueError(f"status '{target}' cannot be set through advance_status")
        with self._lock:
            session = self._owned(session_id, owner_id)
            if session is None or session.status != expected:
                return False
            session.status = target
            if target == IN_PROGRESS:
                session.started_at = at
            else:
                session.completed_at = at
            if total_time_spent is not None:
                session.total_time_spent = total_time_spent
            session.updated_at = at
            return True

    def claim_evaluation(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        now: dt.datetime,
        expires_at: dt.datetime,
    ) -> bool:
        with self._lock:
            session = self._owned(session_id, owner_id)
            if session is None or session.status != COMPLETED:
                return False
            lease = self._leases.get(session_id)
            if lease is not None and lease[1] > now:
                return False
            self._leases[session_id] = (token, expires_at)
            return True

    def evaluation_claimed(self, session_id: str, owner_id: str, *, now: dt.datetime) -> bool:
        with self._lock:
            session = self._owned(session_id, owner_id)
            if session is None or session.status != COMPLETED:
                return False
            lease = self._leases.get(session_id)
            return lease is not None and lease[1] > now

    def release_evaluation(self, session_id: str, owner_id: str, *, token: str) -> None:
        with self._lock:
            lease = self._leases.get(session_id)
            if self._owned(session_id, owner_id) is not None and lease is not None and lease[0] == token:
                del self._leases[session_id]

    def store_feedback(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        feedback: Feedback,
        at: dt.datetime,
    ) -> bool:
        with self._lock:
            session = self._owned(session_id, owner_id)
            lease = self._leases.get(session_id)
            if session is None or session.status != COMPLETED or lease is None or lease[0] != token:
                return False
            updated = session.model_copy(
                update={
                    "status": EVALUATED,
                    "feedback": feedback.model_copy(deep=True),
                    "evaluated_at": at,
                    "updated_at": at,
                }
            )
            self._sessions[session_id] = updated
            del self._leases[session_id]
            return True

    def delete(self, session_id: str, owner_id: str) -> bool:
        with self._lock:
            if self._owned(session_id, owner_id) is None:
                return False
            del self._sessions[session_id]
            self._leases.pop(session_id, None)
            return True


__all__ = ["InMemorySessionRepository"]
