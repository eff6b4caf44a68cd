"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id TEXT PRIMARY KEY,
  owner_id TEXT NOT NULL,
  topic TEXT NOT NULL,
  experience_level TEXT NOT NULL,
  difficulty TEXT NOT NULL,
  number_of_questions INTEGER NOT NULL CHECK (number_of_questions BETWEEN 1 AND 20),
  status TEXT NOT NULL,
  feedback_json TEXT,
  started_at TEXT,
  completed_at TEXT,
  evaluated_at TEXT,
  total_time_spent INTEGER NOT NULL DEFAULT 0,
  ai_model TEXT NOT NULL,
  prompt_version TEXT NOT NULL,
  generation_time_ms INTEGER NOT NULL DEFAULT 0,
  evaluation_token TEXT,
  evaluation_expires_at TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interview_sessions_owner
  ON interview_sessions (owner_id, created_at);
""",
    """
CREATE TABLE IF NOT EXISTS session_questions (
  session_id TEXT NOT NULL,
  position INTEGER NOT NULL,
  question TEXT NOT NULL,
  answer TEXT NOT NULL DEFAULT '',
  answered_at TEXT,
  time_spent INTEGER NOT NULL DEFAULT 0,
  PRIMARY KEY (session_id, position),
  FOREIGN KEY (session_id) REFERENCES interview_sessions(id) ON DELETE CASCADE
);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
