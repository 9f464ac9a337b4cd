"""Shape and sanity checks for generated STAAR questions.

Checks (all issues are collected, none short-circuit):
- question text and explanation present (>= 10 chars)
- exactly 4 answer choices, correct answer in A-D
- TEKS code in N.N[A-Z] format
- math: every "a op b = c" found in question/explanation is correct,
  and the question uses some math vocabulary
- reading: the question refers to a passage/story/etc. and is not too short
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from staarkids.core.questions import ANSWER_LETTERS, Question
from staarkids.core.teks import is_valid_teks

logger = structlog.get_logger(__name__)

MIN_TEXT_LENGTH = 10
MIN_READING_QUESTION_LENGTH = 50
CALCULATION_TOLERANCE = 0.001

CALCULATION_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*([+\-×÷*/])\s*(\d+(?:\.\d+)?)\s*=\s*(\d+(?:\.\d+)?)"
)

MATH_TERMS = (
    "add",
    "subtract",
    "multiply",
    "divide",
    "area",
    "perimeter",
    "volume",
    "fraction",
    "decimal",
)

READING_TERMS = (
    "passage",
    "story",
    "text",
    "author",
    "character",
    "main idea",
    "detail",
)


@dataclass
class ValidationResult:
    """Outcome of validating one question."""

    is_valid: bool
    issues: list[str] = field(default_factory=list)


def extract_calculations(text: str) -> list[str]:
    """Find every "a op b = c" expression in the text."""
    return [match.group(0) for match in CALCULATION_PATTERN.finditer(text)]


def verify_calculation(calculation: str) -> bool:
    """Check that "a op b = c" holds within a small tolerance.

    Division by zero and unrecognized expressions count as wrong.
    """
    match = CALCULATION_PATTERN.search(calculation)
    if not match:
        return False

    a = float(match.group(1))
    operator = match.group(2)
    b = float(match.group(3))
    expected = float(match.group(4))

    if operator == "+":
        actual = a + b
    elif operator == "-":
        actual = a - b
    elif operator in ("×", "*"):
        actual = a * b
    elif operator in ("÷", "/"):
        if b == 0:
            return False
        actual = a / b
    else:
        return False

    return abs(actual - expected) < CALCULATION_TOLERANCE


def _validate_math(question: Question, issues: list[str]) -> None:
    combined = f"{question.question_text} {question.explanation}"

    if "=" in combined:
        for calculation in extract_calculations(combined):
            if not verify_calculation(calculation):
                issues.append(f"Invalid calculation: {calculation}")

    lowered = combined.lower()
    if not any(term in lowered for term in MATH_TERMS):
        issues.append("Question may not be math-related")


def _validate_reading(question: Question, issues: list[str]) -> None:
    lowered = question.question_text.lower()
    if not any(term in lowered for term in READING_TERMS):
        issues.append("Question may not be reading-related")

    if len(question.question_text) < MIN_READING_QUESTION_LENGTH:
        issues.append("Reading question may be too short")


def validate_question(question: Question) -> ValidationResult:
    """Validate a question for STAAR compliance.

    Args:
        question: Question to check

    Returns:
        ValidationResult listing every issue found
    """
    issues: list[str] = []

    if not question.question_text or len(question.question_text) < MIN_TEXT_LENGTH:
        issues.append("Question text too short or missing")

    if not question.answer_choices or len(question.answer_choices) != 4:
        issues.append("Must have exactly 4 answer choices")

    if question.correct_answer not in ANSWER_LETTERS:
        issues.append("Correct answer must be A, B, C, or D")

    if not question.explanation or len(question.explanation) < MIN_TEXT_LENGTH:
        issues.append("Explanation too short or missing")

    if not is_valid_teks(question.teks_standard):
        issues.append("Invalid TEKS standard format")

    if question.subject == "math":
        _validate_math(question, issues)
    elif question.subject == "reading":
        _validate_reading(question, issues)

    if issues:
        logger.debug(
            "question_validation_issues",
            teks_standard=question.teks_standard,
            issues=issues,
        )

    return ValidationResult(is_valid=not issues, issues=issues)
