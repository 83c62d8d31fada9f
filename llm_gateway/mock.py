"""Deterministic offline LLM stand-in used for local runs and tests."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Sequence, Tuple

from .llm_gateway import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, normalize_messages

logger = logging.getLogger(__name__)

REPORT_MARKERS = ("scoring report",)
EVALUATION_MARKERS = ("evaluating a candidate's response",)
GENERATION_MARKERS = ("generate exactly", "interview questions")

DEFAULT_TECH_COUNT = 5
DEFAULT_BACKGROUND_COUNT = 5

FALLBACK_REPLY = "This is a mock response. Please switch to a real LLM provider."

MOCK_QUESTIONS = (
    "Please introduce your technical background and experience.",
    "What is the biggest challenge you have encountered in projects?",
    "How do you resolve conflicts in team collaboration?",
    "What is your learning method for new technologies?",
    "Please describe a project you are proud of.",
    "How do you ensure code quality and maintainability?",
    "What is your view on technical debt?",
    "How do you balance development speed and code quality?",
)

_COUNTS_RE = re.compile(r"generate exactly\s+(\d+)\D+?(\d+)", re.IGNORECASE)
_TRANSCRIPT_RE = re.compile(r"Interview Record \(Q/A transcript\):\n(.*?)\n\s*\nRules:", re.DOTALL)
_ANSWER_RE = re.compile(r"Candidate's Answer:(.*?)\n\s*\nPlease evaluate", re.DOTALL)
_LINE_RE = re.compile(r"^([QA])(\d+):\s?(.*)$")


class MockLlmClient:
    """Answers by sniffing which prompt kind the latest message carries."""

    def __init__(self) -> None:
        self.calls: List[List[Dict[str, str]]] = []

    def chat(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        normalized = normalize_messages(messages)
        self.calls.append(normalized)
        content = normalized[-1]["content"] if normalized else ""
        lowered = content.lower()
        if any(marker in lowered for marker in REPORT_MARKERS):
            logger.debug("Mock LLM answering report prompt")
            return json.dumps(_mock_report(content))
        if any(marker in lowered for marker in EVALUATION_MARKERS):
            logger.debug("Mock LLM answering evaluation prompt")
            return json.dumps(_mock_evaluation(_extract_answer(content)))
        if any(marker in lowered for marker in GENERATION_MARKERS):
            tech, background = parse_counts(content)
            logger.debug("Mock LLM answering generation prompt tech=%d background=%d", tech, background)
            return json.dumps(_mock_questions(tech, background))
        return FALLBACK_REPLY


def parse_counts(content: str) -> Tuple[int, int]:  # Pull requested counts out of a generation prompt
    match = _COUNTS_RE.search(content)
    if match is None:
        return DEFAULT_TECH_COUNT, DEFAULT_BACKGROUND_COUNT
    return int(match.group(1)), int(match.group(2))


def parse_transcript(content: str) -> List[Tuple[str, str]]:  # Recover (question, answer) pairs from a report prompt
    match = _TRANSCRIPT_RE.search(content)
    if match is None:
        return []
    pairs: Dict[int, List[str]] = {}
    order: List[int] = []
    current: Tuple[int, int] | None = None
    for line in match.group(1).splitlines():
        hit = _LINE_RE.match(line)
        if hit:
            number = int(hit.group(2))
            if number not in pairs:
                pairs[number] = ["", ""]
                order.append(number)
            slot = 0 if hit.group(1) == "Q" else 1
            pairs[number][slot] = hit.group(3)
            current = (number, slot)
        elif current is not None and line.strip():
            number, slot = current
            pairs[number][slot] = f"{pairs[number][slot]}\n{line}"
    return [(pairs[number][0].strip(), pairs[number][1].strip()) for number in order]


def _extract_answer(content: str) -> str:
    match = _ANSWER_RE.search(content)
    return match.group(1).strip() if match else ""


def _score_for(answer: str) -> int:
    words = len(answer.split())
    if words == 0:
        return 1
    return max(1, min(10, 3 + words // 5))


def _mock_evaluation(answer: str) -> Dict[str, Any]:
    score = _score_for(answer)
    return {
        "score": score,
        "strengths": ["Relevant to the question", "Clear structure"],
        "weaknesses": ["Could include more concrete examples"],
        "feedback": "The answer addresses the question. Adding measurable outcomes would make it stronger.",
        "suggestions": ["Quantify the impact of your work", "Describe trade-offs you considered"],
    }


def _mock_questions(tech: int, background: int) -> List[Dict[str, Any]]:
    questions: List[Dict[str, Any]] = []
    for index in range(tech):
        questions.append(
            {
                "type": "technical",
                "difficulty": 2 + (index % 3),
                "text": MOCK_QUESTIONS[index % len(MOCK_QUESTIONS)],
                "tags": ["tech", "mock"],
                "expectedPoints": ["point a", "point b", "point c"],
            }
        )
    for index in range(background):
        questions.append(
            {
                "type": "background",
                "difficulty": 2 + (index % 2),
                "text": MOCK_QUESTIONS[(index + 2) % len(MOCK_QUESTIONS)],
                "tags": ["background", "mock"],
                "expectedPoints": ["example", "communication", "impact"],
            }
        )
    return questions


def _mock_report(content: str) -> Dict[str, Any]:
    evaluations: List[Dict[str, Any]] = []
    for question, answer in parse_transcript(content):
        entry = _mock_evaluation(answer)
        if not answer:
            entry["feedback"] = "No answer was provided."
            entry["strengths"] = []
        entry.update({"questionText": question, "userAnswer": answer})
        evaluations.append(entry)
    scores = [entry["score"] for entry in evaluations]
    overall = sum(scores) / len(scores) if scores else 0.0
    if overall >= 7:
        verdict = "Pass"
    elif overall >= 5:
        verdict = "Improve"
    else:
        verdict = "Reject"
    return {
        "overall": f"{overall:.1f}",
        "verdict": verdict,
        "questionEvaluations": evaluations,
    }


__all__ = ["MockLlmClient", "parse_counts", "parse_transcript"]
