from __future__ import annotations  # Interview domain models shared by every layer

import json
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

QuestionType = Literal["technical", "background"]
SessionStatus = Literal["Created", "Started", "Finished"]
EvaluationStatus = Literal["pending", "skipped", "evaluated", "failed"]

CREATED: SessionStatus = "Created"
STARTED: SessionStatus = "Started"
FINISHED: SessionStatus = "Finished"

EMPTY_SCORE = "{}"  # Sentinel for "no evaluation stored"


def utcnow() -> datetime:  # Timezone-aware timestamp used for every entity
    return datetime.now(timezone.utc)


def _lower_first(key: Any) -> Any:
    if isinstance(key, str) and key:
        return key[0].lower() + key[1:]
    return key


def _as_str_list(value: Any) -> Any:  # Accept a lone string where a list is expected
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


class CamelModel(BaseModel):  # snake_case attributes, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Question(CamelModel):  # Generated or manually entered interview question
    type: QuestionType
    difficulty: int = Field(ge=1, le=5)
    text: str
    tags: List[str] = Field(default_factory=list)
    expected_points: List[str] = Field(default_factory=list)

    @field_validator("text")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question text must not be empty")
        return value

    @field_validator("tags", "expected_points", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> Any:
        return _as_str_list(value)


class StoredQuestion(Question):  # Question bank row
    id: str
    created_at: datetime


class QuestionEvaluation(CamelModel):  # Decoded per-answer evaluation
    score: int
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    feedback: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:  # Accept PascalCase keys from the model output
        if isinstance(data, dict):
            return {_lower_first(key): value for key, value in data.items()}
        return data

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> int:  # Round and clamp into 1-10
        if isinstance(value, bool):
            raise ValueError("score must be numeric")
        try:
            numeric = int(round(float(value)))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError("score must be numeric") from exc
        return max(1, min(10, numeric))

    @field_validator("strengths", "weaknesses", "suggestions", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> Any:
        return _as_str_list(value)

    @field_validator("feedback", mode="before")
    @classmethod
    def _coerce_feedback(cls, value: Any) -> Any:
        return "" if value is None else value


class ReportQuestionEvaluation(QuestionEvaluation):  # Report entry carrying its Q/A pair
    question_text: str = ""
    user_answer: str = ""


class ReportJson(CamelModel):  # Decoded final report
    overall: str
    verdict: str = ""
    question_evaluations: List[ReportQuestionEvaluation] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {_lower_first(key): value for key, value in data.items()}
        return data

    @field_validator("overall", mode="before")
    @classmethod
    def _overall_as_text(cls, value: Any) -> Any:  # Keep the score string-encoded
        if isinstance(value, bool):
            raise ValueError("overall must be a number or numeric string")
        if isinstance(value, (int, float)):
            return str(value)
        return value


class SessionQuestion(CamelModel):  # Snapshot of a question inside one session
    id: str
    session_id: str
    order_no: int = Field(ge=1)
    question_text: str
    type: str
    difficulty: int
    answer_text: str = ""
    score_json: str = EMPTY_SCORE
    evaluation_status: EvaluationStatus = "pending"
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def answered(self) -> bool:
        return self.answer_text != ""

    def evaluation(self) -> Optional[QuestionEvaluation]:  # Decode score_json when an evaluation is stored
        if self.evaluation_status != "evaluated":
            return None
        return QuestionEvaluation.model_validate(json.loads(self.score_json))


class InterviewSession(CamelModel):  # One interview attempt
    id: str
    status: SessionStatus = CREATED
    created_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    questions: List[SessionQuestion] = Field(default_factory=list)


class InterviewReport(CamelModel):  # Append-only report row
    id: str
    session_id: str
    report_json: str
    created_at: datetime = Field(default_factory=utcnow)

    def decoded(self) -> ReportJson:
        return ReportJson.model_validate(json.loads(self.report_json))


__all__ = [
    "CREATED",
    "EMPTY_SCORE",
    "FINISHED",
    "STARTED",
    "CamelModel",
    "EvaluationStatus",
    "InterviewReport",
    "InterviewSession",
    "Question",
    "QuestionEvaluation",
    "QuestionType",
    "ReportJson",
    "ReportQuestionEvaluation",
    "SessionQuestion",
    "SessionStatus",
    "StoredQuestion",
    "utcnow",
]
