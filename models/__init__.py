"""Domain models for questions, sessions, evaluations and reports."""
from .interview import (  # noqa: F401
    CREATED,
    EMPTY_SCORE,
    FINISHED,
    STARTED,
    CamelModel,
    EvaluationStatus,
    InterviewReport,
    InterviewSession,
    Question,
    QuestionEvaluation,
    QuestionType,
    ReportJson,
    ReportQuestionEvaluation,
    SessionQuestion,
    SessionStatus,
    StoredQuestion,
    utcnow,
)

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
