"""Generate role-specific interview questions through the LLM gateway."""
from __future__ import annotations

import logging
from typing import List

from llm_gateway import DEFAULT_TEMPERATURE, LlmClient
from models import Question
from prompts import build_question_gen_prompt, question_gen_messages, split_counts
from reconciler import reconcile_question_list

logger = logging.getLogger(__name__)

QUESTION_GEN_MAX_TOKENS = 2048


def generate_questions(
    role: str,
    total: int,
    tech_ratio: float,
    *,
    client: LlmClient,
    max_tokens: int = QUESTION_GEN_MAX_TOKENS,
) -> List[Question]:
    """Ask the model for ``total`` questions with ``tech_ratio`` percent technical.

    Raises :class:`reconciler.ReconciliationError` (carrying the raw reply)
    when no strategy recovers a non-empty question list.
    """

    tech, background = split_counts(total, tech_ratio)
    prompt = build_question_gen_prompt(role, tech, background)
    raw = client.chat(question_gen_messages(prompt), temperature=DEFAULT_TEMPERATURE, max_tokens=max_tokens)
    logger.debug("Question generation raw response (%d chars): %s", len(raw or ""), raw)
    questions = reconcile_question_list(raw).unwrap()
    logger.info("Generated %d question(s) for role=%s tech=%d background=%d", len(questions), role, tech, background)
    return questions


__all__ = ["QUESTION_GEN_MAX_TOKENS", "generate_questions"]
