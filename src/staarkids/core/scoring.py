"""Scoring helpers for practice statistics and mock exams."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from staarkids.core.questions import Question

RECENT_WINDOW = 20
MIN_RECENT_FOR_BLEND = 10
RECENT_WEIGHT = 0.7
OVERALL_WEIGHT = 0.3


def accuracy_percent(correct: int, total: int) -> int:
    """Whole-number accuracy percentage, 0 when nothing was attempted."""
    if total <= 0:
        return 0
    return round(correct / total * 100)


def weighted_recent_score(recent_results: list[bool]) -> float:
    """Average score (0-100) over recent results, newest first.

    The newest result weighs n, the next n-1, down to 1 for the oldest.
    """
    n = len(recent_results)
    if n == 0:
        return 0.0

    weighted = 0.0
    total_weight = 0
    for index, is_correct in enumerate(recent_results):
        weight = n - index
        weighted += (100 if is_correct else 0) * weight
        total_weight += weight
    return weighted / total_weight


def blended_average_score(overall_average: float, recent_results: list[bool]) -> float:
    """Blend recent form with the long-run average.

    With at least MIN_RECENT_FOR_BLEND recent results the score is
    70% weighted-recent plus 30% overall; otherwise it is the overall average.
    """
    recent = recent_results[:RECENT_WINDOW]
    if len(recent) < MIN_RECENT_FOR_BLEND:
        return overall_average
    return weighted_recent_score(recent) * RECENT_WEIGHT + overall_average * OVERALL_WEIGHT


@dataclass
class QuestionResult:
    """Grading of a single exam question."""

    question_id: int | None
    selected_answer: str | None
    correct_answer: str
    is_correct: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "selected_answer": self.selected_answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
        }


@dataclass
class ExamResult:
    """Outcome of grading a whole exam."""

    total_questions: int
    correct_answers: int
    score: float
    results: list[QuestionResult] = field(default_factory=list)


def normalize_letter(answer: str | None) -> str | None:
    """First letter of an answer, upper-cased ("b) 12" -> "B")."""
    if answer is None:
        return None
    cleaned = answer.strip().upper()
    return cleaned[:1] or None


def grade_exam(questions: list[Question], answers: dict[int, str]) -> ExamResult:
    """Grade submitted answers against the exam's questions.

    Args:
        questions: Exam questions (each with a question_id)
        answers: question_id -> selected letter; missing ids count as wrong

    Returns:
        ExamResult with a score rounded to two decimals
    """
    results = []
    for question in questions:
        selected = normalize_letter(answers.get(question.question_id))
        results.append(
            QuestionResult(
                question_id=question.question_id,
                selected_answer=selected,
                correct_answer=question.correct_answer,
                is_correct=selected is not None and selected == question.correct_answer,
            )
        )

    total = len(results)
    correct = sum(1 for r in results if r.is_correct)
    score = round(correct / total * 100, 2) if total else 0.0

    return ExamResult(
        total_questions=total,
        correct_answers=correct,
        score=score,
        results=results,
    )
