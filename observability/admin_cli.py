"""Lightweight CLI helpers for inspecting interview session tables."""
from __future__ import annotations

import argparse
import sqlite3

from config.settings import settings


def tail_sessions(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT s.created_at, s.id, s.status,
                   COUNT(q.id),
                   SUM(CASE WHEN q.answer_text != '' THEN 1 ELSE 0 END)
            FROM interview_sessions s
            LEFT JOIN session_questions q ON q.session_id = s.id
            GROUP BY s.id
            ORDER BY s.created_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, status, total, answered = row
            print(f"[{ts}] {session_id} status={status} answered={answered or 0}/{total}")
    finally:
        conn.close()


def tail_reports(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT created_at, session_id, id, report_json
            FROM interview_reports
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, report_id, report_json = row
            preview = report_json.replace("\n", " ")[:120]
            print(f"[{ts}] {session_id} report={report_id} json={preview}")
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the latest interview sessions")
    parser.add_argument("--tail-reports", type=int, help="Show the latest generated reports")
    args = parser.parse_args()

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.tail_reports:
        tail_reports(args.tail_reports)


if __name__ == "__main__":
    main()
