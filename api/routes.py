"""FastAPI routes for the question bank and interview session control."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response

from api.deps import get_llm_client, get_repositories, get_state_machine
from api.schemas import (
    AnswerReq,
    AnswerResp,
    CreateSessionReq,
    CreateSessionResp,
    GenerateQuestionsReq,
    GenerateQuestionsResp,
    MessageResp,
    NextQuestionResp,
    ReportResp,
)
from config.settings import settings
from interview_session import NotFoundError, PreconditionError, SessionStateMachine
from llm_gateway import LlmClient, LlmGatewayError
from models import InterviewSession, Question, StoredQuestion
from question_generation import generate_questions
from reconciler import ReconciliationError
from session_reports import generate_report_pdf
from storage import Repositories

logger = logging.getLogger(__name__)

questions_router = APIRouter(prefix="/api/questions")
session_router = APIRouter(prefix="/api/session")


def _reconciliation_detail(error: str, exc: ReconciliationError) -> Dict[str, Any]:
    return {"error": error, "details": exc.reason, "rawResponse": exc.raw}


def _raise_http(exc: Exception, action: str) -> NoReturn:
    """Translate a domain exception into the matching HTTP error."""

    if isinstance(exc, HTTPException):
        raise exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, PreconditionError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, ReconciliationError):
        raise HTTPException(status_code=400, detail=_reconciliation_detail(f"Failed to {action}", exc)) from exc
    if isinstance(exc, LlmGatewayError):
        logger.exception("LLM request failed")
        raise HTTPException(status_code=502, detail=f"LLM request failed: {exc}") from exc
    logger.exception("Unexpected error while trying to %s", action)
    raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc


# ---------------------------------------------------------------------- questions


@questions_router.post("/generate", response_model=GenerateQuestionsResp)
def generate(payload: GenerateQuestionsReq, client: LlmClient = Depends(get_llm_client)) -> GenerateQuestionsResp:
    try:
        questions = generate_questions(
            payload.role,
            payload.total,
            payload.tech_ratio,
            client=client,
            max_tokens=settings.QUESTION_GEN_MAX_TOKENS,
        )
    except ReconciliationError as exc:
        raise HTTPException(
            status_code=400,
            detail=_reconciliation_detail("Failed to parse LLM response as question list", exc),
        ) from exc
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "generate questions")
    return GenerateQuestionsResp(questions=questions)


@questions_router.get("", response_model=List[StoredQuestion])
def list_questions(repos: Repositories = Depends(get_repositories)) -> List[StoredQuestion]:
    return repos.questions.list()


@questions_router.post("", response_model=StoredQuestion, status_code=201)
def add_question(payload: Question, repos: Repositories = Depends(get_repositories)) -> StoredQuestion:
    return repos.questions.add(payload)


@questions_router.delete("/{question_id}")
def delete_question(question_id: str, repos: Repositories = Depends(get_repositories)) -> Dict[str, Any]:
    if not repos.questions.delete(question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    return {}


# ---------------------------------------------------------------------- sessions


@session_router.post("/create", response_model=CreateSessionResp)
def create_session(
    payload: CreateSessionReq,
    machine: SessionStateMachine = Depends(get_state_machine),
) -> CreateSessionResp:
    try:
        session_id = machine.create_session(payload.questions)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "create session")
    return CreateSessionResp(session_id=session_id)


@session_router.get("/{session_id}", response_model=InterviewSession)
def get_session(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> InterviewSession:
    try:
        return machine.get_session(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "load session")


@session_router.delete("/{session_id}")
def delete_session(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> Dict[str, Any]:
    try:
        machine.delete_session(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "delete session")
    return {}


@session_router.post("/{session_id}/randomize", response_model=MessageResp)
def randomize(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> MessageResp:
    try:
        machine.randomize_order(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "randomize questions")
    return MessageResp(message="Question order has been randomized")


@session_router.post("/{session_id}/start", response_model=MessageResp)
def start(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> MessageResp:
    try:
        machine.start(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "start interview")
    return MessageResp(message="Interview started")


@session_router.post("/{session_id}/answer", response_model=AnswerResp)
def submit_answer(
    session_id: str,
    payload: AnswerReq,
    machine: SessionStateMachine = Depends(get_state_machine),
) -> AnswerResp:
    try:
        outcome = machine.submit_answer(session_id, payload.order_no, payload.answer_text)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "submit answer")
    return AnswerResp(evaluation_json=outcome.evaluation_json, evaluation_status=outcome.evaluation_status)


@session_router.get("/{session_id}/next", response_model=NextQuestionResp, response_model_exclude_none=True)
def next_question(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> NextQuestionResp:
    try:
        question = machine.get_next_question(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "get next question")
    if question is None:
        return NextQuestionResp(message="All questions have been answered")
    return NextQuestionResp(
        order_no=question.order_no,
        question=question.question_text,
        type=question.type,
        difficulty=question.difficulty,
    )


@session_router.post("/{session_id}/finish", response_model=MessageResp)
def finish(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> MessageResp:
    try:
        machine.finish(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "finish interview")
    return MessageResp(message="Interview finished")


@session_router.post("/{session_id}/report", response_model=ReportResp)
def generate_report(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> ReportResp:
    try:
        report = machine.generate_report(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "generate report")
    return ReportResp(report_json=report)


@session_router.get("/{session_id}/report", response_model=ReportResp)
def latest_report(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> ReportResp:
    try:
        report = machine.latest_report(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "load report")
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return ReportResp(report_json=report)


@session_router.get("/{session_id}/report/pdf")
def latest_report_pdf(session_id: str, machine: SessionStateMachine = Depends(get_state_machine)) -> Response:
    try:
        session = machine.get_session(session_id)
        report = machine.latest_report(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "load report")
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    payload = generate_report_pdf(session, report)
    headers = {"Content-Disposition": f'attachment; filename="interview-report-{session_id}.pdf"'}
    return Response(content=payload, media_type="application/pdf", headers=headers)


__all__ = ["questions_router", "session_router"]
