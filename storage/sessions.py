"""SQLite persistence for interview sessions and their questions."""
from __future__ import annotations

import sqlite3
from typing import Dict, List, Optional

from models import InterviewSession, SessionQuestion

from .sqlite import SqliteRepository, from_text, to_text


def _question_from_row(row: sqlite3.Row) -> SessionQuestion:
    return SessionQuestion(
        id=row["id"],
        session_id=row["session_id"],
        order_no=row["order_no"],
        question_text=row["question_text"],
        type=row["type"],
        difficulty=row["difficulty"],
        answer_text=row["answer_text"],
        score_json=row["score_json"],
        evaluation_status=row["evaluation_status"],
        created_at=from_text(row["created_at"]),
    )


def _session_from_row(row: sqlite3.Row, questions: List[SessionQuestion]) -> InterviewSession:
    return InterviewSession(
        id=row["id"],
        status=row["status"],
        created_at=from_text(row["created_at"]),
        started_at=from_text(row["started_at"]),
        ended_at=from_text(row["ended_at"]),
        questions=questions,
    )


class SqliteSessionRepository(SqliteRepository):  # SQLite-backed session storage
    def create(self, session: InterviewSession) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO interview_sessions (id, status, created_at, started_at, ended_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    session.id,
                    session.status,
                    to_text(session.created_at),
                    to_text(session.started_at),
                    to_text(session.ended_at),
                ),
            )
            conn.executemany(
                """
                INSERT INTO session_questions (
                    id, session_id, order_no, question_text, type, difficulty,
                    answer_text, score_json, evaluation_status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        question.id,
                        session.id,
                        question.order_no,
                        question.question_text,
                        question.type,
                        question.difficulty,
                        question.answer_text,
                        question.score_json,
                        question.evaluation_status,
                        to_text(question.created_at),
                    )
                    for question in session.questions
                ],
            )

    def get(self, session_id: str) -> Optional[InterviewSession]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT id, status, created_at, started_at, ended_at FROM interview_sessions WHERE id = ?",
                (session_id,),
            ).fetchone()
            if row is None:
                return None
            rows = conn.execute(
                "SELECT * FROM session_questions WHERE session_id = ? ORDER BY order_no ASC",
                (session_id,),
            ).fetchall()
        return _session_from_row(row, [_question_from_row(item) for item in rows])

    def list_sessions(self) -> List[InterviewSession]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT id, status, created_at, started_at, ended_at
                FROM interview_sessions
                ORDER BY created_at DESC, rowid DESC
                """
            ).fetchall()
        return [_session_from_row(row, []) for row in rows]

    def update_session(self, session: InterviewSession) -> None:
        with self._conn() as conn:
            conn.execute(
                "UPDATE interview_sessions SET status = ?, started_at = ?, ended_at = ? WHERE id = ?",
                (session.status, to_text(session.started_at), to_text(session.ended_at), session.id),
            )

    def get_question(self, session_id: str, order_no: int) -> Optional[SessionQuestion]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM session_questions WHERE session_id = ? AND order_no = ?",
                (session_id, order_no),
            ).fetchone()
        return _question_from_row(row) if row is not None else None

    def update_question(self, question: SessionQuestion) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                UPDATE session_questions
                SET answer_text = ?, score_json = ?, evaluation_status = ?
                WHERE id = ?
                """,
                (question.answer_text, question.score_json, question.evaluation_status, question.id),
            )

    def reorder(self, session_id: str, order: Dict[str, int]) -> None:
        with self._conn() as conn:
            # park on negative numbers first so UNIQUE(session_id, order_no) holds row by row
            conn.execute(
                "UPDATE session_questions SET order_no = -order_no WHERE session_id = ?",
                (session_id,),
            )
            conn.executemany(
                "UPDATE session_questions SET order_no = ? WHERE id = ? AND session_id = ?",
                [(order_no, question_id, session_id) for question_id, order_no in order.items()],
            )

    def delete(self, session_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM interview_sessions WHERE id = ?", (session_id,))
            return cur.rowcount > 0


__all__ = ["SqliteSessionRepository"]
