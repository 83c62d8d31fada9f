"""Interview session state machine."""
from .errors import InterviewSessionError, MalformedReportError, NotFoundError, PreconditionError
from .interview_session import REPORT_MAX_TOKENS, AnswerOutcome, SessionStateMachine

__all__ = [
    "AnswerOutcome",
    "InterviewSessionError",
    "MalformedReportError",
    "NotFoundError",
    "PreconditionError",
    "REPORT_MAX_TOKENS",
    "SessionStateMachine",
]
