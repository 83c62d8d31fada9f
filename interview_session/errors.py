"""Exceptions raised by the session state machine."""
from __future__ import annotations

from reconciler import ReconciliationError


class InterviewSessionError(Exception):
    pass


class NotFoundError(InterviewSessionError, KeyError):
    """Unknown session id or order number."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class PreconditionError(InterviewSessionError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Session must be {expected}, current status: {actual}")
        self.expected = expected
        self.actual = actual


class MalformedReportError(ReconciliationError):
    """The report reply could not be reconciled into a report object."""


__all__ = ["InterviewSessionError", "MalformedReportError", "NotFoundError", "PreconditionError"]
