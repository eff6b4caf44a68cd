"""Persistence port consumed by the session lifecycle."""
from __future__ import annotations

import datetime as dt
from typing import Optional, Protocol

from .models import Feedback, Session, SessionStatus


class SessionRepository(Protocol):
    """Storage for sessions keyed on ``(session_id, owner_id)``.

    Every mutating call is a compare-and-set evaluated atomically by the store and
    reports whether it applied.
    """

    def insert(self, session: Session) -> None: ...

    def get(self, session_id: str, owner_id: str) -> Optional[Session]: ...

    def set_answer_if_empty(
        self,
        session_id: str,
        owner_id: str,
        index: int,
        *,
        answer: str,
        answered_at: dt.datetime,
        time_spent: int,
    ) -> bool: ...

    def advance_status(
        self,
        session_id: str,
        owner_id: str,
        *,
        expected: SessionStatus,
        target: SessionStatus,
        at: dt.datetime,
        total_time_spent: Optional[int] = None,
    ) -> bool: ...

    def claim_evaluation(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        now: dt.datetime,
        expires_at: dt.datetime,
    ) -> bool: ...

    def evaluation_claimed(self, session_id: str, owner_id: str, *, now: dt.datetime) -> bool: ...

    def release_evaluation(self, session_id: str, owner_id: str, *, token: str) -> None: ...

    def store_feedback(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        feedback: Feedback,
        at: dt.datetime,
    ) -> bool: ...

    def delete(self, session_id: str, owner_id: str) -> bool: ...


__all__ = ["SessionRepository"]
