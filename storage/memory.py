"""In-memory repositories used by tests and the ``memory`` storage backend."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import uuid4

from models import InterviewReport, InterviewSession, Question, SessionQuestion, StoredQuestion, utcnow


@dataclass
class MemoryDatabase:  # Shared tables so session deletes can cascade to reports
    sessions: Dict[str, InterviewSession] = field(default_factory=dict)
    reports: List[InterviewReport] = field(default_factory=list)
    questions: Dict[str, StoredQuestion] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)


class MemorySessionRepository:
    def __init__(self, db: MemoryDatabase | None = None) -> None:
        self._db = db or MemoryDatabase()

    def create(self, session: InterviewSession) -> None:
        order_numbers = [question.order_no for question in session.questions]
        if len(order_numbers) != len(set(order_numbers)):
            raise ValueError("order numbers must be unique within a session")
        with self._db.lock:
            if session.id in self._db.sessions:
                raise ValueError(f"Session '{session.id}' already exists")
            self._db.sessions[session.id] = session.model_copy(deep=True)

    def get(self, session_id: str) -> Optional[InterviewSession]:
        with self._db.lock:
            session = self._db.sessions.get(session_id)
            if session is None:
                return None
            copy = session.model_copy(deep=True)
        copy.questions.sort(key=lambda item: item.order_no)
        return copy

    def list_sessions(self) -> List[InterviewSession]:
        with self._db.lock:
            sessions = [
                session.model_copy(update={"questions": []}, deep=True)
                for session in reversed(list(self._db.sessions.values()))
            ]
        return sorted(sessions, key=lambda item: item.created_at, reverse=True)

    def update_session(self, session: InterviewSession) -> None:
        with self._db.lock:
            stored = self._db.sessions.get(session.id)
            if stored is None:
                return
            stored.status = session.status
            stored.started_at = session.started_at
            stored.ended_at = session.ended_at

    def get_question(self, session_id: str, order_no: int) -> Optional[SessionQuestion]:
        with self._db.lock:
            session = self._db.sessions.get(session_id)
            if session is None:
                return None
            for question in session.questions:
                if question.order_no == order_no:
                    return question.model_copy(deep=True)
        return None

    def update_question(self, question: SessionQuestion) -> None:
        with self._db.lock:
            session = self._db.sessions.get(question.session_id)
            if session is None:
                return
            for stored in session.questions:
                if stored.id == question.id:
                    stored.answer_text = question.answer_text
                    stored.score_json = question.score_json
                    stored.evaluation_status = question.evaluation_status
                    return

    def reorder(self, session_id: str, order: Dict[str, int]) -> None:
        with self._db.lock:
            session = self._db.sessions.get(session_id)
            if session is None:
                return
            for stored in session.questions:
                if stored.id in order:
                    stored.order_no = order[stored.id]

    def delete(self, session_id: str) -> bool:
        with self._db.lock:
            if self._db.sessions.pop(session_id, None) is None:
                return False
            self._db.reports[:] = [report for report in self._db.reports if report.session_id != session_id]
            return True


class MemoryReportRepository:
    def __init__(self, db: MemoryDatabase | None = None) -> None:
        self._db = db or MemoryDatabase()

    def add(self, report: InterviewReport) -> None:
        with self._db.lock:
            if report.session_id not in self._db.sessions:
                raise KeyError(f"Session '{report.session_id}' not found")
            self._db.reports.append(report.model_copy(deep=True))

    def list_for_session(self, session_id: str) -> List[InterviewReport]:
        with self._db.lock:
            reports = [report.model_copy(deep=True) for report in self._db.reports if report.session_id == session_id]
        # stable sort keeps insertion order for equal timestamps
        return sorted(reports, key=lambda item: item.created_at)

    def latest(self, session_id: str) -> Optional[InterviewReport]:
        reports = self.list_for_session(session_id)
        return reports[-1] if reports else None


class MemoryQuestionRepository:
    def __init__(self, db: MemoryDatabase | None = None) -> None:
        self._db = db or MemoryDatabase()

    def add(self, question: Question) -> StoredQuestion:
        stored = StoredQuestion(id=str(uuid4()), created_at=utcnow(), **question.model_dump())
        with self._db.lock:
            self._db.questions[stored.id] = stored
        return stored.model_copy(deep=True)

    def list(self) -> List[StoredQuestion]:
        with self._db.lock:
            questions = [question.model_copy(deep=True) for question in reversed(list(self._db.questions.values()))]
        return sorted(questions, key=lambda item: item.created_at, reverse=True)

    def get(self, question_id: str) -> Optional[StoredQuestion]:
        with self._db.lock:
            question = self._db.questions.get(question_id)
            return question.model_copy(deep=True) if question is not None else None

    def delete(self, question_id: str) -> bool:
        with self._db.lock:
            return self._db.questions.pop(question_id, None) is not None


__all__ = [
    "MemoryDatabase",
    "MemoryQuestionRepository",
    "MemoryReportRepository",
    "MemorySessionRepository",
]
