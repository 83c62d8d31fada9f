from __future__ import annotations  # Re-export prompt builders

from .prompt_factory import (  # noqa: F401
    DIFFICULTY_LABELS,
    EVALUATION_SYSTEM,
    QUESTION_GEN_SYSTEM,
    REPORT_SYSTEM,
    build_answer_evaluation_prompt,
    build_question_gen_prompt,
    build_question_gen_prompt_by_ratio,
    build_report_prompt,
    build_transcript,
    difficulty_label,
    evaluation_messages,
    question_gen_messages,
    report_messages,
    split_counts,
)

__all__ = [
    "DIFFICULTY_LABELS",
    "EVALUATION_SYSTEM",
    "QUESTION_GEN_SYSTEM",
    "REPORT_SYSTEM",
    "build_answer_evaluation_prompt",
    "build_question_gen_prompt",
    "build_question_gen_prompt_by_ratio",
    "build_report_prompt",
    "build_transcript",
    "difficulty_label",
    "evaluation_messages",
    "question_gen_messages",
    "report_messages",
    "split_counts",
]
