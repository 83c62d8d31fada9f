"""Repository contracts the session state machine and API depend on.

Repositories hold no business rules: they store and return entities keyed by
id. Returned entities are copies; callers persist changes explicitly.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from models import InterviewReport, InterviewSession, Question, SessionQuestion, StoredQuestion


class SessionRepository(Protocol):
    def create(self, session: InterviewSession) -> None:
        """Insert a session together with its questions."""

    def get(self, session_id: str) -> Optional[InterviewSession]:
        """Return the session with questions ordered by ``order_no``."""

    def list_sessions(self) -> List[InterviewSession]:
        """Return every session, newest first, without questions."""

    def update_session(self, session: InterviewSession) -> None:
        """Persist status and timestamps."""

    def get_question(self, session_id: str, order_no: int) -> Optional[SessionQuestion]: ...

    def update_question(self, question: SessionQuestion) -> None:
        """Persist answer, score and evaluation status of one question."""

    def reorder(self, session_id: str, order: Dict[str, int]) -> None:
        """Assign new order numbers by question id in one atomic step."""

    def delete(self, session_id: str) -> bool:
        """Delete a session, cascading to its questions and reports."""


class ReportRepository(Protocol):
    def add(self, report: InterviewReport) -> None: ...

    def list_for_session(self, session_id: str) -> List[InterviewReport]:
        """Reports for a session, oldest first."""

    def latest(self, session_id: str) -> Optional[InterviewReport]: ...


class QuestionRepository(Protocol):
    def add(self, question: Question) -> StoredQuestion: ...

    def list(self) -> List[StoredQuestion]:
        """Question bank, newest first."""

    def get(self, question_id: str) -> Optional[StoredQuestion]: ...

    def delete(self, question_id: str) -> bool: ...


__all__ = ["QuestionRepository", "ReportRepository", "SessionRepository"]
