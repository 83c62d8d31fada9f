from __future__ import annotations  # Re-export reconciler public API

from .reconciler import (  # noqa: F401
    QUESTIONS_KEY,
    Reconciled,
    ReconciliationError,
    Strategy,
    bracket_slice,
    direct_array,
    list_strategies,
    reconcile_object,
    reconcile_question_list,
    run_strategies,
    strip_code_fences,
    wrapped_object,
)

__all__ = [
    "QUESTIONS_KEY",
    "Reconciled",
    "ReconciliationError",
    "Strategy",
    "bracket_slice",
    "direct_array",
    "list_strategies",
    "reconcile_object",
    "reconcile_question_list",
    "run_strategies",
    "strip_code_fences",
    "wrapped_object",
]
