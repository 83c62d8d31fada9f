"""Prompt text for question generation, answer evaluation and final reports.

Every builder is a pure function of its arguments so identical inputs always
produce identical prompts.
"""
from __future__ import annotations

from textwrap import dedent
from typing import Dict, Iterable, List, Tuple

QUESTION_GEN_SYSTEM = (
    "You are a professional interviewer. Generate structured interview questions in valid JSON format only."
)
EVALUATION_SYSTEM = (
    "You are a professional AI interviewer, skilled at providing detailed evaluation of candidate answers."
)
REPORT_SYSTEM = (
    "You are a professional AI interviewer, skilled at generating structured interview scoring reports."
)

DIFFICULTY_LABELS: Dict[int, str] = {
    1: "Beginner",
    2: "Beginner-Intermediate",
    3: "Intermediate",
    4: "Intermediate-Advanced",
    5: "Advanced",
}
DEFAULT_DIFFICULTY_LABEL = DIFFICULTY_LABELS[3]

_QUESTION_GEN_TEMPLATE = dedent(
    """
    You are a JSON generator. Output ONLY a valid JSON array.
    DO NOT include explanations, prefixes, code fences, or any extra text.

    Role: {role}
    Generate exactly {tech} "technical" questions and {bg} "background" questions.
    Each item must follow this schema:
    {{
      "type": "technical" | "background",
      "difficulty": 1..5,                // integer
      "text": "one clear question, no numbering or quotes around terms unnecessarily",
      "tags": ["short-tag-1", "short-tag-2"],
      "expectedPoints": ["key point 1", "key point 2", "key point 3"]
    }}

    Rules:
    - type must be exactly "technical" or "background".
    - difficulty must be an integer from 1 to 5.
    - text should be one sentence, no leading numbering like "1." or "Q:".
    - tags: 1-3 short tokens.
    - expectedPoints: 2-4 concise bullet points, each a short phrase.
    - Return ONLY the JSON array. No prose, no backticks, no trailing commas.
    {constraints}
    Now produce exactly {total} items in a single JSON array with the required mix:
    - {tech} items where "type": "technical"
    - {bg} items where "type": "background"

    Output ONLY the JSON array:
    """
).strip()

_EVALUATION_TEMPLATE = dedent(
    """
    You are an expert technical interviewer evaluating a candidate's response.

    Question: {question}
    Question Type: {type}
    Difficulty Level: {difficulty}

    Candidate's Answer: {answer}

    Please evaluate this answer and provide feedback in JSON format:

    Rules:
    - Output ONLY a JSON object, no prose, no code fences, no trailing commas.
    - Use this exact schema:
    {{
      "score": 1-10,                    // Overall score for this specific question
      "strengths": ["key strength 1", "key strength 2"],
      "weaknesses": ["area for improvement 1", "area for improvement 2"],
      "feedback": "2-3 sentence constructive feedback",
      "suggestions": ["specific improvement suggestion 1", "suggestion 2"]
    }}

    Evaluation Criteria:
    - Consider the question difficulty and type
    - Evaluate technical accuracy, completeness, and clarity
    - Assess problem-solving approach and reasoning
    - Consider communication effectiveness
    - Be constructive and specific in feedback

    Output ONLY the JSON object.
    """
).strip()

_REPORT_TEMPLATE = dedent(
    """
    You are a hiring committee summarizer. Produce a comprehensive scoring report in JSON.

    Interview Record (Q/A transcript):
    {transcript}

    Rules:
    - Output ONLY a JSON object, no prose, no code fences, no trailing commas.
    - Use this exact schema:
    {{
      "overall": "0-10",  // Overall score as a string (e.g., "7.5")
      "verdict": "Pass" | "Improve" | "Reject",
      "questionEvaluations": [
        {{
          "questionText": "The question that was asked",
          "userAnswer": "The candidate's answer",
          "feedback": "2-3 sentence constructive feedback on the answer",
          "strengths": ["key strength 1", "key strength 2"],
          "weaknesses": ["area for improvement 1", "area for improvement 2"],
          "suggestions": ["specific improvement suggestion 1", "suggestion 2"],
          "score": 1-10  // Individual question score
        }}
      ]
    }}

    Constraints:
    - The overall score should reflect the candidate's performance across all questions
    - Consider technical accuracy, communication clarity, and problem-solving ability
    - Include one entry in questionEvaluations per Q/A pair, in transcript order
    - Strengths, weaknesses, and suggestions should be specific and actionable
    - Individual question scores should contribute to the overall score
    - Output ONLY the JSON object.
    """
).strip()


def split_counts(total: int, tech_ratio: float) -> Tuple[int, int]:
    """Convert a total and a 0-100 technical percentage into (technical, background) counts."""

    total = max(0, int(total))
    # built-in round: halves go to the even neighbour
    tech = round(total * (float(tech_ratio) / 100.0))
    tech = max(0, min(total, tech))
    return tech, total - tech


def build_question_gen_prompt(role: str, tech_count: int, bg_count: int) -> str:
    constraints = ""
    if tech_count == 0:
        constraints += '- All items MUST have type "background" only. Generating any "technical" item is forbidden.\n'
    if bg_count == 0:
        constraints += '- All items MUST have type "technical" only. Generating any "background" item is forbidden.\n'
    return _QUESTION_GEN_TEMPLATE.format(
        role=role,
        tech=tech_count,
        bg=bg_count,
        total=tech_count + bg_count,
        constraints=constraints,
    )


def build_question_gen_prompt_by_ratio(role: str, total: int, tech_ratio: float) -> str:
    tech, bg = split_counts(total, tech_ratio)
    return build_question_gen_prompt(role, tech, bg)


def difficulty_label(difficulty: int) -> str:
    return DIFFICULTY_LABELS.get(difficulty, DEFAULT_DIFFICULTY_LABEL)


def build_answer_evaluation_prompt(question_text: str, answer_text: str, question_type: str, difficulty: int) -> str:
    return _EVALUATION_TEMPLATE.format(
        question=question_text,
        type=question_type,
        difficulty=difficulty_label(difficulty),
        answer=answer_text,
    )


def build_transcript(pairs: Iterable[Tuple[int, str, str]]) -> str:
    """Render ``(order_no, question, answer)`` triples as a Q/A transcript.

    Triples are sorted by order number and every question is rendered; an
    unanswered question keeps its ``A{n}:`` line with an empty answer.
    """

    lines: List[str] = []
    for order_no, question, answer in sorted(pairs, key=lambda item: item[0]):
        lines.append(f"Q{order_no}: {question}")
        lines.append(f"A{order_no}: {answer}")
        lines.append("")
    return "\n".join(lines).rstrip()


def build_report_prompt(transcript: str) -> str:
    return _REPORT_TEMPLATE.format(transcript=transcript)


def question_gen_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": QUESTION_GEN_SYSTEM},
        {"role": "user", "content": prompt},
    ]


def evaluation_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": EVALUATION_SYSTEM},
        {"role": "user", "content": prompt},
    ]


def report_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": REPORT_SYSTEM},
        {"role": "user", "content": prompt},
    ]
