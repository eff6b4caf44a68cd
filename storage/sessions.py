"""SQLite-backed session repository with conditional writes."""
from __future__ import annotations

import datetime as dt
import sqlite3
from typing import Dict, List, Optional

from interview_session.models import (
    COMPLETED,
    EVALUATED,
    IN_PROGRESS,
    Feedback,
    QuestionAnswer,
    Session,
    SessionMetadata,
    SessionStatus,
)

from .migrate import migrate
from .sqlite import get_conn

_TRANSITION_COLUMNS: Dict[str, str] = {
    IN_PROGRESS: "started_at",
    COMPLETED: "completed_at",
}


def _ts(value: Optional[dt.datetime]) -> Optional[str]:
    # Fixed-width ISO text so lexical comparison in SQL matches time order.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat(timespec="microseconds")


def _parse_ts(value: Optional[str]) -> Optional[dt.datetime]:
    if not value:
        return None
    return dt.datetime.fromisoformat(value)


class SqliteSessionRepository:  # SQLite persistence for interview sessions
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        migrate(db_path)

    def insert(self, session: Session) -> None:
        with get_conn(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO interview_sessions (
                    id, owner_id, topic, experience_level, difficulty, number_of_questions,
                    status, feedback_json, started_at, completed_at, evaluated_at, total_time_spent,
                    ai_model, prompt_version, generation_time_ms, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.id,
                    session.owner_id,
                    session.topic,
                    session.experience_level,
                    session.difficulty,
                    session.number_of_questions,
                    session.status,
                    session.feedback.model_dump_json() if session.feedback else None,
                    _ts(session.started_at),
                    _ts(session.completed_at),
                    _ts(session.evaluated_at),
                    session.total_time_spent,
                    session.metadata.ai_model,
                    session.metadata.prompt_version,
                    session.metadata.generation_time,
                    _ts(session.created_at),
                    _ts(session.updated_at),
                ),
            )
            conn.executemany(
                """
                INSERT INTO session_questions (session_id, position, question, answer, answered_at, time_spent)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (session.id, position, item.question, item.answer, _ts(item.answered_at), item.time_spent)
                    for position, item in enumerate(session.questions)
                ],
            )

    def get(self, session_id: str, owner_id: str) -> Optional[Session]:
        with get_conn(self._db_path) as conn:
            # Both reads share one snapshot so a concurrent delete cannot split them.
            conn.execute("BEGIN")
            row = conn.execute(
                "SELECT * FROM interview_sessions WHERE id = ? AND owner_id = ?",
                (session_id, owner_id),
            ).fetchone()
            if row is None:
                return None
            question_rows = conn.execute(
                """
                SELECT question, answer, answered_at, time_spent
                FROM session_questions
                WHERE session_id = ?
                ORDER BY position
                """,
                (session_id,),
            ).fetchall()
        return _session_from_rows(row, question_rows)

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
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE session_questions
                SET answer = ?, answered_at = ?, time_spent = ?
                WHERE session_id = ? AND position = ? AND TRIM(answer) = ''
                  AND EXISTS (SELECT 1 FROM interview_sessions WHERE id = ? AND owner_id = ?)
                """,
                (answer, _ts(answered_at), time_spent, session_id, index, session_id, owner_id),
            )
            if cur.rowcount != 1:
                return False
            conn.execute(
                "UPDATE interview_sessions SET updated_at = ? WHERE id = ?",
                (_ts(answered_at), session_id),
            )
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
        column = _TRANSITION_COLUMNS.get(target)
        if column is None:
            raise ValueError(f"status '{target}' cannot be set through advance_status")
        assignments = ["status = ?", f"{column} = ?", "updated_at = ?"]
        params: List[object] = [target, _ts(at), _ts(at)]
        if total_time_spent is not None:
            assignments.append("total_time_spent = ?")
            params.append(total_time_spent)
        params.extend([session_id, owner_id, expected])
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                f"UPDATE interview_sessions SET {', '.join(assignments)} "
                "WHERE id = ? AND owner_id = ? AND status = ?",
                params,
            )
            return cur.rowcount == 1

    def claim_evaluation(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        now: dt.datetime,
        expires_at: dt.datetime,
    ) -> bool:
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE interview_sessions
                SET evaluation_token = ?, evaluation_expires_at = ?, updated_at = ?
                WHERE id = ? AND owner_id = ? AND status = ?
                  AND (evaluation_token IS NULL OR evaluation_expires_at <= ?)
                """,
                (token, _ts(expires_at), _ts(now), session_id, owner_id, COMPLETED, _ts(now)),
            )
            return cur.rowcount == 1

    def evaluation_claimed(self, session_id: str, owner_id: str, *, now: dt.datetime) -> bool:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                """
                SELECT 1 FROM interview_sessions
                WHERE id = ? AND owner_id = ? AND status = ?
                  AND evaluation_token IS NOT NULL AND evaluation_expires_at > ?
                """,
                (session_id, owner_id, COMPLETED, _ts(now)),
            ).fetchone()
            return row is not None

    def release_evaluation(self, session_id: str, owner_id: str, *, token: str) -> None:
        with get_conn(self._db_path) as conn:
            conn.execute(
                """
                UPDATE interview_sessions
                SET evaluation_token = NULL, evaluation_expires_at = NULL
                WHERE id = ? AND owner_id = ? AND evaluation_token = ?
                """,
                (session_id, owner_id, token),
            )

    def store_feedback(
        self,
        session_id: str,
        owner_id: str,
        *,
        token: str,
        feedback: Feedback,
        at: dt.datetime,
    ) -> bool:
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE interview_sessions
                SET status = ?, feedback_json = ?, evaluated_at = ?, updated_at = ?,
                    evaluation_token = NULL, evaluation_expires_at = NULL
                WHERE id = ? AND owner_id = ? AND status = ? AND evaluation_token = ?
                """,
                (
                    EVALUATED,
                    feedback.model_dump_json(),
                    _ts(at),
                    _ts(at),
                    session_id,
                    owner_id,
                    COMPLETED,
                    token,
                ),
            )
            return cur.rowcount == 1

    def delete(self, session_id: str, owner_id: str) -> bool:
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                "DELETE FROM interview_sessions WHERE id = ? AND owner_id = ?",
                (session_id, owner_id),
            )
            return cur.rowcount == 1


def _session_from_rows(row: sqlite3.Row, question_rows: List[sqlite3.Row]) -> Session:
    feedback = Feedback.model_validate_json(row["feedback_json"]) if row["feedback_json"] else None
    return Session(
        id=row["id"],
        owner_id=row["owner_id"],
        topic=row["topic"],
        experience_level=row["experience_level"],
        difficulty=row["difficulty"],
        number_of_questions=row["number_of_questions"],
        questions=[
            QuestionAnswer(
                question=item["question"],
                answer=item["answer"],
                answered_at=_parse_ts(item["answered_at"]),
                time_spent=item["time_spent"],
            )
            for item in question_rows
        ],
        status=row["status"],
        feedback=feedback,
        started_at=_parse_ts(row["started_at"]),
        completed_at=_parse_ts(row["completed_at"]),
        evaluated_at=_parse_ts(row["evaluated_at"]),
        total_time_spent=row["total_time_spent"],
        metadata=SessionMetadata(
            ai_model=row["ai_model"],
            prompt_version=row["prompt_version"],
            generation_time=row["generation_time_ms"],
        ),
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


__all__ = ["SqliteSessionRepository"]
