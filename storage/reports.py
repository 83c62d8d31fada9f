"""SQLite persistence for interview reports."""
from __future__ import annotations

import sqlite3
from typing import List, Optional

from models import InterviewReport

from .sqlite import SqliteRepository, from_text, to_text


def _report_from_row(row: sqlite3.Row) -> InterviewReport:
    return InterviewReport(
        id=row["id"],
        session_id=row["session_id"],
        report_json=row["report_json"],
        created_at=from_text(row["created_at"]),
    )


class SqliteReportRepository(SqliteRepository):  # Append-only report storage
    def add(self, report: InterviewReport) -> None:
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO interview_reports (id, session_id, report_json, created_at) VALUES (?, ?, ?, ?)",
                (report.id, report.session_id, report.report_json, to_text(report.created_at)),
            )

    def list_for_session(self, session_id: str) -> List[InterviewReport]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT id, session_id, report_json, created_at
                FROM interview_reports
                WHERE session_id = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (session_id,),
            ).fetchall()
        return [_report_from_row(row) for row in rows]

    def latest(self, session_id: str) -> Optional[InterviewReport]:
        with self._conn() as conn:
            row = conn.execute(
                """
                SELECT id, session_id, report_json, created_at
                FROM interview_reports
                WHERE session_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT 1
                """,
                (session_id,),
            ).fetchone()
        return _report_from_row(row) if row is not None else None


__all__ = ["SqliteReportRepository"]
