"""Recover structured data from LLM replies that were asked to be pure JSON.

Models routinely wrap their JSON in prose, preambles or markdown fences, so
list recovery runs an ordered list of parser strategies and stops at the
first one that yields at least one valid element. Every strategy returns a
tagged :class:`Reconciled` result; decode failures never escape a strategy.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from models import Question

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

QUESTIONS_KEY = "questions"  # The one wrapping key the generation prompt and parser agree on


class ReconciliationError(ValueError):
    """LLM output could not be coerced into the expected schema."""

    def __init__(self, reason: str, raw: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


@dataclass(frozen=True)
class Reconciled(Generic[T]):
    """Tagged result: either ``value`` (ok) or ``reason`` (failed), plus the raw text."""

    ok: bool
    raw: str
    value: Optional[T] = None
    reason: str = ""
    stage: str = ""

    @classmethod
    def success(cls, value: T, raw: str, stage: str) -> "Reconciled[T]":
        return cls(ok=True, raw=raw, value=value, stage=stage)

    @classmethod
    def failure(cls, reason: str, raw: str, stage: str = "") -> "Reconciled[T]":
        return cls(ok=False, raw=raw, reason=reason, stage=stage)

    def unwrap(self) -> T:
        if not self.ok:
            raise ReconciliationError(self.reason, self.raw)
        return self.value  # type: ignore[return-value]


Strategy = Callable[[str], Reconciled[List[Any]]]


def _decode_array(text: str, adapter: TypeAdapter, stage: str) -> Reconciled[List[Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return Reconciled.failure(f"{stage}: not valid JSON ({exc.msg})", text, stage)
    if not isinstance(data, list):
        return Reconciled.failure(f"{stage}: expected a JSON array, got {type(data).__name__}", text, stage)
    return _validate_items(data, adapter, text, stage)


def _validate_items(data: List[Any], adapter: TypeAdapter, text: str, stage: str) -> Reconciled[List[Any]]:
    if not data:
        return Reconciled.failure(f"{stage}: array is empty", text, stage)
    try:
        items = adapter.validate_python(data)
    except ValidationError as exc:
        return Reconciled.failure(f"{stage}: {exc.error_count()} invalid element field(s)", text, stage)
    return Reconciled.success(items, text, stage)


def direct_array(adapter: TypeAdapter) -> Strategy:  # Stage 1: the whole reply is the array
    def _run(raw: str) -> Reconciled[List[Any]]:
        return _decode_array(raw, adapter, "direct_array")

    return _run


def wrapped_object(adapter: TypeAdapter, key: str) -> Strategy:  # Stage 2: {"<key>": [...]}
    def _run(raw: str) -> Reconciled[List[Any]]:
        stage = "wrapped_object"
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            return Reconciled.failure(f"{stage}: not valid JSON ({exc.msg})", raw, stage)
        if not isinstance(data, dict):
            return Reconciled.failure(f"{stage}: expected a JSON object", raw, stage)
        inner = data.get(key)
        if not isinstance(inner, list):
            return Reconciled.failure(f"{stage}: no '{key}' array property", raw, stage)
        return _validate_items(inner, adapter, raw, stage)

    return _run


def bracket_slice(adapter: TypeAdapter) -> Strategy:  # Stage 3: first '[' through last ']'
    def _run(raw: str) -> Reconciled[List[Any]]:
        stage = "bracket_slice"
        start = raw.find("[")
        end = raw.rfind("]")
        if start < 0 or end <= start:
            return Reconciled.failure(f"{stage}: no bracketed span", raw, stage)
        return _decode_array(raw[start : end + 1], adapter, stage)

    return _run


def run_strategies(raw: str, strategies: Sequence[Strategy]) -> Reconciled[List[Any]]:
    """Try ``strategies`` in order and return the first success.

    On total failure the result carries every stage's reason and the
    unmodified ``raw`` text, not the slice a later stage looked at.
    """

    reasons: List[str] = []
    for strategy in strategies:
        result = strategy(raw)
        if result.ok:
            logger.debug("Reconciled %d item(s) via %s", len(result.value or []), result.stage)
            return Reconciled.success(result.value or [], raw, result.stage)
        reasons.append(result.reason)
    return Reconciled.failure("; ".join(reasons) or "no strategies", raw)


def list_strategies(item_model: Type[M], *, wrapper_key: str) -> List[Strategy]:
    adapter = TypeAdapter(List[item_model])  # type: ignore[valid-type]
    return [
        direct_array(adapter),
        wrapped_object(adapter, wrapper_key),
        bracket_slice(adapter),
    ]


_QUESTION_STRATEGIES = list_strategies(Question, wrapper_key=QUESTIONS_KEY)


def reconcile_question_list(raw: str) -> Reconciled[List[Question]]:
    """Recover a non-empty, order-preserving list of questions from ``raw``.

    Elements are validated with :class:`Question`; one invalid element fails
    the whole stage rather than being dropped or coerced.
    """

    result = run_strategies(raw or "", _QUESTION_STRATEGIES)
    if not result.ok:
        logger.warning("Question list reconciliation failed: %s", result.reason)
    return result


def strip_code_fences(content: str) -> str:  # Remove a single enclosing markdown fence
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


def reconcile_object(raw: str, model: Type[M]) -> Reconciled[M]:
    """Decode ``raw`` as exactly one JSON object validated by ``model``."""

    stage = "direct_object"
    text = strip_code_fences(raw or "")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return Reconciled.failure(f"{stage}: not valid JSON ({exc.msg})", raw, stage)
    if not isinstance(data, dict):
        return Reconciled.failure(f"{stage}: expected a JSON object, got {type(data).__name__}", raw, stage)
    try:
        value = model.model_validate(data)
    except ValidationError as exc:
        return Reconciled.failure(f"{stage}: {exc.error_count()} invalid field(s) for {model.__name__}", raw, stage)
    return Reconciled.success(value, raw, stage)


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
