"""Pydantic schemas for the interview API (camelCase on the wire)."""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from models import CamelModel, EvaluationStatus, Question, ReportJson


class GenerateQuestionsReq(CamelModel):
    role: str = Field(min_length=1)
    total: int = Field(ge=1, le=50)
    tech_ratio: float = Field(ge=0, le=100)


class GenerateQuestionsResp(CamelModel):
    questions: List[Question]


class CreateSessionReq(CamelModel):
    config_id: Optional[str] = None  # Accepted for older clients; not used
    questions: Optional[List[Question]] = None


class CreateSessionResp(CamelModel):
    session_id: str
    message: str = "Interview session created successfully"


class MessageResp(CamelModel):
    message: str


class AnswerReq(CamelModel):
    order_no: int
    answer_text: str = ""


class AnswerResp(CamelModel):
    message: str = "Answer submitted successfully"
    evaluation_json: str
    evaluation_status: EvaluationStatus


class NextQuestionResp(CamelModel):  # Either the next question or the all-answered message
    order_no: Optional[int] = None
    question: Optional[str] = None
    type: Optional[str] = None
    difficulty: Optional[int] = None
    message: Optional[str] = None


class ReportResp(CamelModel):
    report_json: ReportJson
