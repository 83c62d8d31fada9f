"""Repository behaviour shared by the SQLite and in-memory backends."""
from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from models import InterviewReport, InterviewSession, Question, SessionQuestion
from storage import Repositories, memory_repositories, sqlite_repositories
from storage.migrate import migrate

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_db: str) -> Repositories:
    if request.param == "memory":
        return memory_repositories()
    return sqlite_repositories(tmp_db)


def _session(session_id: str, count: int = 3, created_at: datetime = T0) -> InterviewSession:
    return InterviewSession(
        id=session_id,
        created_at=created_at,
        questions=[
            SessionQuestion(
                id=f"{session_id}-q{index}",
                session_id=session_id,
                order_no=index,
                question_text=f"Question {index}",
                type="technical",
                difficulty=3,
                created_at=created_at,
            )
            for index in range(1, count + 1)
        ],
    )


def test_migrate_is_idempotent(tmp_db: str):
    migrate(tmp_db)
    migrate(tmp_db)
    with sqlite3.connect(tmp_db) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"questions", "interview_sessions", "session_questions", "interview_reports"} <= tables


def test_create_and_get_session(store: Repositories):
    store.sessions.create(_session("s1"))
    loaded = store.sessions.get("s1")
    assert loaded is not None
    assert loaded.status == "Created"
    assert loaded.created_at == T0
    assert [question.order_no for question in loaded.questions] == [1, 2, 3]
    assert store.sessions.get("missing") is None


def test_list_sessions_newest_first(store: Repositories):
    store.sessions.create(_session("old", created_at=T0))
    store.sessions.create(_session("new", created_at=T0 + timedelta(minutes=5)))
    listed = store.sessions.list_sessions()
    assert [session.id for session in listed] == ["new", "old"]
    assert all(not session.questions for session in listed)


def test_update_session_and_question(store: Repositories):
    store.sessions.create(_session("s1"))
    session = store.sessions.get("s1")
    session.status = "Started"
    session.started_at = T0 + timedelta(seconds=30)
    store.sessions.update_session(session)

    question = store.sessions.get_question("s1", 2)
    question.answer_text = "An answer"
    question.score_json = '{"score": 7}'
    question.evaluation_status = "evaluated"
    store.sessions.update_question(question)

    reloaded = store.sessions.get("s1")
    assert reloaded.status == "Started"
    assert reloaded.started_at == T0 + timedelta(seconds=30)
    stored = store.sessions.get_question("s1", 2)
    assert stored.answer_text == "An answer"
    assert stored.evaluation_status == "evaluated"
    assert store.sessions.get_question("s1", 9) is None


def test_returned_entities_are_copies(store: Repositories):
    store.sessions.create(_session("s1"))
    question = store.sessions.get_question("s1", 1)
    question.answer_text = "not persisted"
    assert store.sessions.get_question("s1", 1).answer_text == ""


def test_reorder_swaps_order_numbers(store: Repositories):
    store.sessions.create(_session("s1"))
    store.sessions.reorder("s1", {"s1-q1": 3, "s1-q2": 1, "s1-q3": 2})
    loaded = store.sessions.get("s1")
    assert [question.id for question in loaded.questions] == ["s1-q2", "s1-q3", "s1-q1"]
    assert [question.order_no for question in loaded.questions] == [1, 2, 3]


def test_reports_are_append_only_and_latest_wins(store: Repositories):
    store.sessions.create(_session("s1"))
    store.reports.add(InterviewReport(id="r1", session_id="s1", report_json='{"overall": "5"}', created_at=T0))
    store.reports.add(
        InterviewReport(id="r2", session_id="s1", report_json='{"overall": "8"}', created_at=T0 + timedelta(minutes=1))
    )
    assert [report.id for report in store.reports.list_for_session("s1")] == ["r1", "r2"]
    assert store.reports.latest("s1").id == "r2"
    assert store.reports.latest("other") is None


def test_delete_cascades_to_questions_and_reports(store: Repositories):
    store.sessions.create(_session("s1"))
    store.sessions.create(_session("s2"))
    store.reports.add(InterviewReport(id="r1", session_id="s1", report_json="{}", created_at=T0))

    assert store.sessions.delete("s1") is True
    assert store.sessions.delete("s1") is False
    assert store.sessions.get("s1") is None
    assert store.sessions.get_question("s1", 1) is None
    assert store.reports.list_for_session("s1") == []
    assert store.sessions.get("s2") is not None


def test_duplicate_order_numbers_are_rejected(store: Repositories):
    session = _session("s1", count=2)
    session.questions[1].order_no = 1
    with pytest.raises((ValueError, sqlite3.IntegrityError)):
        store.sessions.create(session)


def test_question_bank_round_trip(store: Repositories):
    first = store.questions.add(Question(type="technical", difficulty=2, text="First", tags=["a"], expected_points=["x"]))
    second = store.questions.add(Question(type="background", difficulty=1, text="Second"))

    assert store.questions.get(first.id).tags == ["a"]
    assert store.questions.get(first.id).expected_points == ["x"]
    assert [question.id for question in store.questions.list()] == [second.id, first.id]
    assert store.questions.delete(first.id) is True
    assert store.questions.delete(first.id) is False
    assert store.questions.get(first.id) is None
