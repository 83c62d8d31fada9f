"""SQLite persistence for the question bank."""
from __future__ import annotations

import json
import sqlite3
from typing import List, Optional
from uuid import uuid4

from models import Question, StoredQuestion, utcnow

from .sqlite import SqliteRepository, from_text, to_text


def _question_from_row(row: sqlite3.Row) -> StoredQuestion:
    return StoredQuestion(
        id=row["id"],
        type=row["type"],
        difficulty=row["difficulty"],
        text=row["text"],
        tags=json.loads(row["tags"]),
        expected_points=json.loads(row["expected_points"]),
        created_at=from_text(row["created_at"]),
    )


class SqliteQuestionRepository(SqliteRepository):  # Question bank storage
    def add(self, question: Question) -> StoredQuestion:
        stored = StoredQuestion(
            id=str(uuid4()),
            created_at=utcnow(),
            **question.model_dump(),
        )
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO questions (id, type, difficulty, text, tags, expected_points, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    stored.type,
                    stored.difficulty,
                    stored.text,
                    json.dumps(stored.tags),
                    json.dumps(stored.expected_points),
                    to_text(stored.created_at),
                ),
            )
        return stored

    def list(self) -> List[StoredQuestion]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM questions ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [_question_from_row(row) for row in rows]

    def get(self, question_id: str) -> Optional[StoredQuestion]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
        return _question_from_row(row) if row is not None else None

    def delete(self, question_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM questions WHERE id = ?", (question_id,))
            return cur.rowcount > 0


__all__ = ["SqliteQuestionRepository"]
