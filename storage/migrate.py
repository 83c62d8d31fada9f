"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS questions (
  id TEXT PRIMARY KEY,
  type TEXT NOT NULL CHECK (type IN ('technical', 'background')),
  difficulty INTEGER NOT NULL CHECK (difficulty BETWEEN 1 AND 5),
  text TEXT NOT NULL,
  tags TEXT NOT NULL,
  expected_points TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id TEXT PRIMARY KEY,
  status TEXT NOT NULL CHECK (status IN ('Created', 'Started', 'Finished')),
  created_at TEXT NOT NULL,
  started_at TEXT,
  ended_at TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS session_questions (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL,
  order_no INTEGER NOT NULL,
  question_text TEXT NOT NULL,
  type TEXT NOT NULL,
  difficulty INTEGER NOT NULL,
  answer_text TEXT NOT NULL DEFAULT '',
  score_json TEXT NOT NULL DEFAULT '{}',
  evaluation_status TEXT NOT NULL DEFAULT 'pending',
  created_at TEXT NOT NULL,
  UNIQUE (session_id, order_no),
  FOREIGN KEY (session_id) REFERENCES interview_sessions(id) ON DELETE CASCADE
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_reports (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL,
  report_json TEXT NOT NULL,
  created_at TEXT NOT NULL,
  FOREIGN KEY (session_id) REFERENCES interview_sessions(id) ON DELETE CASCADE
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interview_reports_session
  ON interview_reports (session_id, created_at);
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
