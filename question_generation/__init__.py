from __future__ import annotations  # Re-export question generation API

from .question_generation import QUESTION_GEN_MAX_TOKENS, generate_questions

__all__ = ["QUESTION_GEN_MAX_TOKENS", "generate_questions"]
