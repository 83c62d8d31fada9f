"""Tests for the interview domain models."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from models import (
    EMPTY_SCORE,
    InterviewReport,
    Question,
    QuestionEvaluation,
    ReportJson,
    SessionQuestion,
)


def test_question_rejects_unknown_type_and_blank_text():
    with pytest.raises(ValidationError):
        Question(type="behavioral", difficulty=2, text="Q")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        Question(type="technical", difficulty=2, text="   ")
    with pytest.raises(ValidationError):
        Question(type="technical", difficulty=0, text="Q")


def test_question_serializes_camel_case():
    question = Question(type="technical", difficulty=2, text="Q", expected_points=["a"])
    assert question.model_dump(by_alias=True)["expectedPoints"] == ["a"]
    assert Question.model_validate({"type": "technical", "difficulty": 2, "text": "Q", "expectedPoints": ["b"]}).expected_points == ["b"]


@pytest.mark.parametrize("raw, expected", [(0, 1), (7, 7), (7.6, 8), ("9", 9), (42, 10)])
def test_evaluation_score_is_clamped(raw, expected):
    assert QuestionEvaluation(score=raw).score == expected


@pytest.mark.parametrize("raw", ["great", True, None])
def test_evaluation_score_must_be_numeric(raw):
    with pytest.raises(ValidationError):
        QuestionEvaluation(score=raw)


def test_evaluation_accepts_pascal_case_and_null_feedback():
    evaluation = QuestionEvaluation.model_validate({"Score": 6, "Strengths": "concise", "Feedback": None})
    assert evaluation.score == 6
    assert evaluation.strengths == ["concise"]
    assert evaluation.feedback == ""


def test_report_overall_is_kept_as_text():
    assert ReportJson.model_validate({"overall": 6}).overall == "6"
    assert ReportJson.model_validate({"overall": "7.6", "verdict": "Pass"}).verdict == "Pass"
    with pytest.raises(ValidationError):
        ReportJson.model_validate({"verdict": "Pass"})


def test_session_question_evaluation_decodes_only_when_evaluated():
    question = SessionQuestion(
        id="q1", session_id="s1", order_no=1, question_text="Q", type="technical", difficulty=3
    )
    assert question.score_json == EMPTY_SCORE
    assert not question.answered
    assert question.evaluation() is None

    question.answer_text = "A"
    question.score_json = json.dumps({"score": 5})
    question.evaluation_status = "evaluated"
    assert question.answered
    assert question.evaluation().score == 5  # type: ignore[union-attr]


def test_interview_report_decodes_payload():
    report = InterviewReport(id="r1", session_id="s1", report_json=json.dumps({"overall": "5.0", "verdict": "Improve"}))
    assert report.decoded().verdict == "Improve"
