"""Tests for the interview session state machine."""
from __future__ import annotations

import json
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Sequence

import pytest

from interview_session import MalformedReportError, NotFoundError, PreconditionError, SessionStateMachine
from interview_session.interview_session import _SESSION_LOCKS
from llm_gateway import LlmGatewayError, MockLlmClient
from models import EMPTY_SCORE, Question
from storage import Repositories, memory_repositories, sqlite_repositories


class ScriptedClient:
    """LLM stand-in whose reply is computed by ``reply(messages)``."""

    def __init__(self, reply: Callable[[Sequence[Dict[str, str]]], str]) -> None:
        self._reply = reply
        self.calls: List[Sequence[Dict[str, str]]] = []

    def chat(self, messages, *, temperature: float = 0.6, max_tokens: int = 800) -> str:
        self.calls.append(messages)
        return self._reply(messages)


def _raise(exc: Exception) -> Callable[[Sequence[Dict[str, str]]], str]:
    def _reply(_messages):
        raise exc

    return _reply


def _machine(repos: Repositories, client) -> SessionStateMachine:
    return SessionStateMachine(repos.sessions, repos.reports, client, rng=random.Random(3))


def _finished_session(machine: SessionStateMachine, questions: List[Question]) -> str:
    session_id = machine.create_session(questions)
    machine.start(session_id)
    machine.finish(session_id)
    return session_id


def test_create_session_snapshots_questions(machine: SessionStateMachine, sample_questions):
    session_id = machine.create_session(sample_questions)
    session = machine.get_session(session_id)

    assert session.status == "Created"
    assert session.started_at is None and session.ended_at is None
    assert [question.order_no for question in session.questions] == [1, 2, 3]
    assert [question.question_text for question in session.questions] == [q.text for q in sample_questions]
    assert all(question.answer_text == "" and question.score_json == EMPTY_SCORE for question in session.questions)


def test_create_session_without_questions(machine: SessionStateMachine):
    session_id = machine.create_session()
    assert machine.get_session(session_id).questions == []
    assert machine.get_next_question(session_id) is None


def test_status_moves_strictly_forward(machine: SessionStateMachine, sample_questions):
    session_id = machine.create_session(sample_questions)

    with pytest.raises(PreconditionError) as excinfo:
        machine.finish(session_id)
    assert excinfo.value.expected == "Started"
    assert excinfo.value.actual == "Created"

    started = machine.start(session_id)
    assert started.status == "Started"
    assert started.started_at is not None
    with pytest.raises(PreconditionError):
        machine.start(session_id)

    finished = machine.finish(session_id)
    assert finished.ended_at is not None
    with pytest.raises(PreconditionError):
        machine.finish(session_id)
    with pytest.raises(PreconditionError):
        machine.start(session_id)
    assert machine.get_session(session_id).status == "Finished"


def test_unknown_session_raises_not_found(machine: SessionStateMachine):
    for call in (machine.start, machine.finish, machine.get_next_question, machine.generate_report, machine.get_session):
        with pytest.raises(NotFoundError):
            call("missing")
    with pytest.raises(NotFoundError):
        machine.submit_answer("missing", 1, "answer")
    with pytest.raises(NotFoundError):
        machine.delete_session("missing")


def test_submit_answer_in_created_state_is_evaluated(machine: SessionStateMachine, mock_llm, sample_questions):
    session_id = machine.create_session(sample_questions)

    outcome = machine.submit_answer(session_id, 1, "Consistency, availability and partition tolerance trade-offs.")

    assert outcome.evaluation_status == "evaluated"
    assert outcome.evaluation is not None and 1 <= outcome.evaluation.score <= 10
    stored = machine.get_session(session_id).questions[0]
    assert stored.answer_text.startswith("Consistency")
    assert stored.evaluation_status == "evaluated"
    assert json.loads(stored.score_json)["score"] == outcome.evaluation.score
    assert machine.get_session(session_id).status == "Created"
    assert len(mock_llm.calls) == 1


def test_blank_answer_skips_evaluation(machine: SessionStateMachine, mock_llm, sample_questions):
    session_id = machine.create_session(sample_questions)
    outcome = machine.submit_answer(session_id, 2, "   ")

    assert outcome.evaluation_json == EMPTY_SCORE
    assert outcome.evaluation_status == "skipped"
    assert mock_llm.calls == []
    stored = machine.get_session(session_id).questions[1]
    assert stored.answer_text == "   "
    assert stored.score_json == EMPTY_SCORE


def test_unknown_order_number(machine: SessionStateMachine, sample_questions):
    session_id = machine.create_session(sample_questions)
    with pytest.raises(NotFoundError):
        machine.submit_answer(session_id, 99, "answer")


@pytest.mark.parametrize(
    "reply",
    [
        _raise(LlmGatewayError("LLM transport failed")),
        _raise(TimeoutError("timed out")),
        lambda _messages: "I think this answer is pretty good!",
        lambda _messages: '{"score": "excellent"}',
    ],
)
def test_evaluation_failures_keep_the_answer(repos: Repositories, sample_questions, reply):
    machine = _machine(repos, ScriptedClient(reply))
    session_id = machine.create_session(sample_questions)

    outcome = machine.submit_answer(session_id, 1, "A real answer")

    assert outcome.evaluation_status == "failed"
    assert outcome.evaluation_json == EMPTY_SCORE
    stored = repos.sessions.get_question(session_id, 1)
    assert stored.answer_text == "A real answer"
    assert stored.score_json == EMPTY_SCORE
    assert stored.evaluation_status == "failed"


def test_resubmission_overwrites_answer(machine: SessionStateMachine, sample_questions):
    session_id = machine.create_session(sample_questions)
    machine.submit_answer(session_id, 1, "first")
    machine.submit_answer(session_id, 1, "")
    stored = machine.get_session(session_id).questions[0]
    assert stored.answer_text == ""
    assert stored.evaluation_status == "skipped"
    assert machine.get_next_question(session_id).order_no == 1


def test_stale_evaluation_is_not_attached_to_newer_answer(repos: Repositories, sample_questions):
    mock = MockLlmClient()
    holder: Dict[str, SessionStateMachine] = {}
    state = {"nested": False}

    def reply(messages):
        if not state["nested"]:
            state["nested"] = True
            # a second request replaces the answer while the first is being evaluated
            holder["machine"].submit_answer(session_id, 1, "second answer with quite a few more words in it")
        return mock.chat(messages)

    machine = _machine(repos, ScriptedClient(reply))
    holder["machine"] = machine
    session_id = machine.create_session(sample_questions)

    machine.submit_answer(session_id, 1, "first")

    stored = repos.sessions.get_question(session_id, 1)
    assert stored.answer_text == "second answer with quite a few more words in it"
    assert stored.evaluation_status == "evaluated"
    assert json.loads(stored.score_json)["score"] == 5


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_db: str) -> Repositories:
    if request.param == "memory":
        return memory_repositories()
    return sqlite_repositories(tmp_db)


def test_concurrent_answers_to_different_questions(store: Repositories, sample_questions):
    mock = MockLlmClient()
    barrier = threading.Barrier(len(sample_questions), timeout=10)

    def reply(messages):
        # all three evaluations are in flight at once
        barrier.wait()
        return mock.chat(messages)

    machine = _machine(store, ScriptedClient(reply))
    session_id = machine.create_session(sample_questions)
    answers = {order_no: f"Answer number {order_no} with a few extra words" for order_no in (1, 2, 3)}

    with ThreadPoolExecutor(max_workers=len(answers)) as pool:
        outcomes = list(pool.map(lambda item: machine.submit_answer(session_id, *item), answers.items()))

    assert [outcome.evaluation_status for outcome in outcomes] == ["evaluated"] * 3
    for order_no, text in answers.items():
        stored = store.sessions.get_question(session_id, order_no)
        assert stored.answer_text == text
        assert stored.evaluation_status == "evaluated"
        assert json.loads(stored.score_json)["score"] >= 1


def test_session_locks_are_released(machine: SessionStateMachine, sample_questions):
    before = len(_SESSION_LOCKS)
    for index in range(50):
        with pytest.raises(NotFoundError):
            machine.submit_answer(f"missing-{index}", 1, "x")
        with pytest.raises(NotFoundError):
            machine.start(f"missing-{index}")

    session_id = machine.create_session(sample_questions)
    machine.randomize_order(session_id)
    machine.start(session_id)
    machine.submit_answer(session_id, 1, "An answer")
    machine.finish(session_id)
    machine.generate_report(session_id)

    assert len(_SESSION_LOCKS) == before
    assert session_id not in _SESSION_LOCKS


def test_next_question_returns_lowest_unanswered(machine: SessionStateMachine, sample_questions):
    session_id = machine.create_session(sample_questions)
    assert machine.get_next_question(session_id).order_no == 1
    machine.submit_answer(session_id, 1, "done")
    machine.submit_answer(session_id, 3, "done")
    assert machine.get_next_question(session_id).order_no == 2
    machine.submit_answer(session_id, 2, "done")
    assert machine.get_next_question(session_id) is None


def test_randomize_preserves_numbers_and_texts(repos: Repositories):
    questions = [Question(type="technical", difficulty=3, text=f"Question {index}") for index in range(6)]
    machine = _machine(repos, MockLlmClient())
    session_id = machine.create_session(questions)
    before = {question.id: question.question_text for question in machine.get_session(session_id).questions}

    machine.randomize_order(session_id)

    after = machine.get_session(session_id).questions
    assert sorted(question.order_no for question in after) == [1, 2, 3, 4, 5, 6]
    assert {question.id: question.question_text for question in after} == before


def test_randomize_without_questions(machine: SessionStateMachine):
    session_id = machine.create_session([])
    with pytest.raises(NotFoundError, match="No interview questions found"):
        machine.randomize_order(session_id)
    with pytest.raises(NotFoundError):
        machine.randomize_order("missing")


def test_report_requires_finished(machine: SessionStateMachine, mock_llm, repos: Repositories, sample_questions):
    session_id = machine.create_session(sample_questions)
    with pytest.raises(PreconditionError):
        machine.generate_report(session_id)
    machine.start(session_id)
    with pytest.raises(PreconditionError):
        machine.generate_report(session_id)
    assert repos.reports.list_for_session(session_id) == []
    assert mock_llm.calls == []

    machine.finish(session_id)
    report = machine.generate_report(session_id)
    assert len(report.question_evaluations) == 3
    assert len(repos.reports.list_for_session(session_id)) == 1


def test_reports_append_and_latest_is_returned(machine: SessionStateMachine, repos: Repositories, sample_questions):
    session_id = _finished_session(machine, sample_questions)
    assert machine.latest_report(session_id) is None
    machine.generate_report(session_id)
    second = machine.generate_report(session_id)
    assert len(repos.reports.list_for_session(session_id)) == 2
    assert machine.latest_report(session_id) == second


def test_malformed_report_persists_nothing(repos: Repositories, sample_questions):
    machine = _machine(repos, ScriptedClient(lambda _messages: "Overall the candidate did fine."))
    session_id = _finished_session(machine, sample_questions)

    with pytest.raises(MalformedReportError) as excinfo:
        machine.generate_report(session_id)

    assert excinfo.value.raw == "Overall the candidate did fine."
    assert repos.reports.list_for_session(session_id) == []


def test_report_gateway_errors_propagate(repos: Repositories, sample_questions):
    machine = _machine(repos, ScriptedClient(_raise(LlmGatewayError("LLM returned status 500"))))
    session_id = _finished_session(machine, sample_questions)

    with pytest.raises(LlmGatewayError):
        machine.generate_report(session_id)
    assert repos.reports.list_for_session(session_id) == []


def test_transcript_renders_unanswered_questions(repos: Repositories):
    client = ScriptedClient(lambda _messages: '{"overall": "5.0", "verdict": "Improve", "questionEvaluations": []}')
    machine = _machine(repos, client)
    questions = [
        Question(type="technical", difficulty=2, text="What is a closure?"),
        Question(type="background", difficulty=2, text="Describe your last team."),
    ]
    session_id = machine.create_session(questions)
    machine.start(session_id)
    machine.submit_answer(session_id, 1, "")
    machine.finish(session_id)

    machine.generate_report(session_id)

    prompt = client.calls[-1][-1]["content"]
    assert "Q1: What is a closure?\nA1: \n\nQ2: Describe your last team.\nA2:\n\nRules:" in prompt


def test_end_to_end_with_mock_gateway(machine: SessionStateMachine):
    questions = [
        Question(type="technical", difficulty=3, text="Explain dependency injection."),
        Question(type="background", difficulty=2, text="Why are you changing jobs?"),
    ]
    session_id = machine.create_session(questions)
    machine.start(session_id)
    first = machine.submit_answer(session_id, 1, "It decouples construction from use so components are testable.")
    second = machine.submit_answer(session_id, 2, "")
    assert first.evaluation_status == "evaluated"
    assert second.evaluation_status == "skipped"
    assert second.evaluation_json == EMPTY_SCORE
    assert machine.get_next_question(session_id).order_no == 2  # a blank answer leaves the question open
    machine.finish(session_id)

    skipped = machine.get_session(session_id).questions[1]
    assert skipped.score_json == EMPTY_SCORE
    assert skipped.evaluation_status == "skipped"

    report = machine.generate_report(session_id)

    assert len(report.question_evaluations) == 2
    assert [entry.question_text for entry in report.question_evaluations] == [
        "Explain dependency injection.",
        "Why are you changing jobs?",
    ]
    assert report.question_evaluations[0].user_answer == "It decouples construction from use so components are testable."
    assert report.question_evaluations[1].user_answer == ""
    assert report.verdict in {"Pass", "Improve", "Reject"}
    assert machine.latest_report(session_id) == report


def test_delete_session_cascades(machine: SessionStateMachine, repos: Repositories, sample_questions):
    session_id = _finished_session(machine, sample_questions)
    machine.generate_report(session_id)
    machine.delete_session(session_id)
    assert repos.sessions.get(session_id) is None
    assert repos.reports.list_for_session(session_id) == []
    assert machine.list_sessions() == []
