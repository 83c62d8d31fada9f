from __future__ import annotations  # Interview session lifecycle

import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence
from uuid import uuid4

from llm_gateway import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, LlmClient
from models import (
    CREATED,
    EMPTY_SCORE,
    FINISHED,
    STARTED,
    EvaluationStatus,
    InterviewReport,
    InterviewSession,
    Question,
    QuestionEvaluation,
    ReportJson,
    SessionQuestion,
    utcnow,
)
from observability import log_event, span
from prompts import (
    build_answer_evaluation_prompt,
    build_report_prompt,
    build_transcript,
    evaluation_messages,
    report_messages,
)
from reconciler import reconcile_object
from storage import ReportRepository, SessionRepository

from .errors import MalformedReportError, NotFoundError, PreconditionError

logger = logging.getLogger(__name__)

REPORT_MAX_TOKENS = 2048


class _LockEntry:  # Session lock plus the number of callers using it
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


_SESSION_LOCKS: Dict[str, _LockEntry] = {}
_SESSION_LOCKS_GUARD = threading.Lock()


@contextmanager
def _session_lock(session_id: str) -> Iterator[None]:
    """Hold the session's lock; the entry is dropped when its last holder leaves."""

    with _SESSION_LOCKS_GUARD:
        entry = _SESSION_LOCKS.get(session_id)
        if entry is None:
            entry = _SESSION_LOCKS[session_id] = _LockEntry()
        entry.holders += 1
    try:
        with entry.lock:
            yield
    finally:
        with _SESSION_LOCKS_GUARD:
            entry.holders -= 1
            if entry.holders == 0:
                _SESSION_LOCKS.pop(session_id, None)


@dataclass(frozen=True)
class AnswerOutcome:  # Result of one submit_answer call
    order_no: int
    answer_text: str
    evaluation_json: str
    evaluation_status: EvaluationStatus
    evaluation: Optional[QuestionEvaluation] = None


class SessionStateMachine:
    """Drive one interview session through Created -> Started -> Finished.

    Status checks and the writes they guard run under a per-session lock.
    LLM calls run outside the lock.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        reports: ReportRepository,
        client: LlmClient,
        *,
        rng: Optional[random.Random] = None,
        evaluation_max_tokens: int = DEFAULT_MAX_TOKENS,
        report_max_tokens: int = REPORT_MAX_TOKENS,
    ) -> None:
        self._sessions = sessions
        self._reports = reports
        self._client = client
        self._rng = rng or random.Random()
        self._evaluation_max_tokens = evaluation_max_tokens
        self._report_max_tokens = report_max_tokens

    # ------------------------------------------------------------------ lifecycle

    def create_session(self, questions: Optional[Sequence[Question]] = None) -> str:
        session_id = str(uuid4())
        now = utcnow()
        snapshots = [
            SessionQuestion(
                id=str(uuid4()),
                session_id=session_id,
                order_no=index + 1,
                question_text=question.text,
                type=question.type,
                difficulty=question.difficulty,
                created_at=now,
            )
            for index, question in enumerate(questions or [])
        ]
        session = InterviewSession(id=session_id, status=CREATED, created_at=now, questions=snapshots)
        self._sessions.create(session)
        log_event("session_created", session_id, questions=len(snapshots))
        return session_id

    def randomize_order(self, session_id: str) -> None:
        """Shuffle order numbers among the session's questions (Fisher-Yates)."""

        with _session_lock(session_id):
            session = self._sessions.get(session_id)
            if session is None or not session.questions:
                raise NotFoundError("No interview questions found")
            ids = [question.id for question in session.questions]
            numbers = [question.order_no for question in session.questions]
            for i in range(len(numbers) - 1, 0, -1):
                j = self._rng.randrange(i + 1)
                numbers[i], numbers[j] = numbers[j], numbers[i]
            self._sessions.reorder(session_id, dict(zip(ids, numbers)))
        log_event("session_randomized", session_id, questions=len(ids))

    def start(self, session_id: str) -> InterviewSession:
        with _session_lock(session_id):
            session = self._require_session(session_id)
            if session.status != CREATED:
                raise PreconditionError(CREATED, session.status)
            session.status = STARTED
            session.started_at = utcnow()
            self._sessions.update_session(session)
        log_event("session_started", session_id, status=STARTED)
        return session

    def finish(self, session_id: str) -> InterviewSession:
        with _session_lock(session_id):
            session = self._require_session(session_id)
            if session.status != STARTED:
                raise PreconditionError(STARTED, session.status)
            session.status = FINISHED
            session.ended_at = utcnow()
            self._sessions.update_session(session)
        log_event("session_finished", session_id, status=FINISHED)
        return session

    # ------------------------------------------------------------------ answers

    def submit_answer(self, session_id: str, order_no: int, answer_text: str) -> AnswerOutcome:
        """Store an answer and, when it is not blank, evaluate it.

        Allowed in every status. Evaluation failures are logged and stored
        as the empty score; they never reach the caller.
        """

        skip = not answer_text.strip()
        with _session_lock(session_id):
            question = self._sessions.get_question(session_id, order_no)
            if question is None:
                raise NotFoundError("Corresponding question not found")
            question.answer_text = answer_text
            question.score_json = EMPTY_SCORE
            question.evaluation_status = "skipped" if skip else "pending"
            self._sessions.update_question(question)
        log_event("answer_submitted", session_id, order_no=order_no)

        if skip:
            return AnswerOutcome(order_no, answer_text, EMPTY_SCORE, "skipped")

        evaluation = self._evaluate(session_id, question)
        if evaluation is None:
            status: EvaluationStatus = "failed"
            score_json = EMPTY_SCORE
        else:
            status = "evaluated"
            score_json = evaluation.model_dump_json(by_alias=True)

        with _session_lock(session_id):
            current = self._sessions.get_question(session_id, order_no)
            if current is None or current.id != question.id or current.answer_text != answer_text:
                # a newer answer replaced this one while the model was thinking
                logger.info("Dropping stale evaluation for session=%s order_no=%d", session_id, order_no)
                return AnswerOutcome(order_no, answer_text, score_json, status, evaluation)
            current.score_json = score_json
            current.evaluation_status = status
            self._sessions.update_question(current)
        log_event("answer_evaluated", session_id, order_no=order_no, evaluation=status)
        return AnswerOutcome(order_no, answer_text, score_json, status, evaluation)

    def _evaluate(self, session_id: str, question: SessionQuestion) -> Optional[QuestionEvaluation]:
        prompt = build_answer_evaluation_prompt(
            question.question_text,
            question.answer_text,
            question.type,
            question.difficulty,
        )
        try:
            with span("evaluate_answer", session_id):
                raw = self._client.chat(
                    evaluation_messages(prompt),
                    temperature=DEFAULT_TEMPERATURE,
                    max_tokens=self._evaluation_max_tokens,
                )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Question evaluation failed for session=%s order_no=%d: %s", session_id, question.order_no, exc)
            return None
        result = reconcile_object(raw, QuestionEvaluation)
        if not result.ok:
            logger.warning("Question evaluation unreadable for session=%s: %s", session_id, result.reason)
            return None
        return result.value

    def get_next_question(self, session_id: str) -> Optional[SessionQuestion]:
        """Lowest-numbered unanswered question, or ``None`` once all are answered."""

        session = self._require_session(session_id)
        for question in session.questions:
            if not question.answered:
                return question
        return None

    # ------------------------------------------------------------------ reports

    def generate_report(self, session_id: str) -> ReportJson:
        with _session_lock(session_id):
            session = self._require_session(session_id)
            if session.status != FINISHED:
                raise PreconditionError(FINISHED, session.status)
            transcript = build_transcript(
                (question.order_no, question.question_text, question.answer_text)
                for question in session.questions
            )

        with span("generate_report", session_id):
            raw = self._client.chat(
                report_messages(build_report_prompt(transcript)),
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=self._report_max_tokens,
            )

        result = reconcile_object(raw, ReportJson)
        if not result.ok or result.value is None:
            log_event("report_failed", session_id, level=logging.WARNING, reason=result.reason)
            raise MalformedReportError(result.reason, raw)
        report = result.value

        with _session_lock(session_id):
            self._require_session(session_id)
            self._reports.add(
                InterviewReport(
                    id=str(uuid4()),
                    session_id=session_id,
                    report_json=report.model_dump_json(by_alias=True),
                    created_at=utcnow(),
                )
            )
        log_event("report_generated", session_id, verdict=report.verdict)
        return report

    def latest_report(self, session_id: str) -> Optional[ReportJson]:
        self._require_session(session_id)
        stored = self._reports.latest(session_id)
        return stored.decoded() if stored is not None else None

    # ------------------------------------------------------------------ queries

    def get_session(self, session_id: str) -> InterviewSession:
        return self._require_session(session_id)

    def list_sessions(self) -> List[InterviewSession]:
        return self._sessions.list_sessions()

    def delete_session(self, session_id: str) -> None:
        with _session_lock(session_id):
            if not self._sessions.delete(session_id):
                raise NotFoundError("Interview session not found")
        log_event("session_deleted", session_id)

    def _require_session(self, session_id: str) -> InterviewSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Interview session not found")
        return session


__all__ = ["AnswerOutcome", "REPORT_MAX_TOKENS", "SessionStateMachine"]
