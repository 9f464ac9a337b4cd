"""STAAR question shape, prompt building and response parsing.

The LLM is asked for a JSON object with the camelCase fields
questionText, answerChoices, correctAnswer, explanation, hasImage and
imageDescription. Everything else on a Question (grade, subject, TEKS,
category...) comes from the request, never from the model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from staarkids.core.teks import default_category
from staarkids.llm.client import parse_json_content
from staarkids.prompts.registry import get_prompt

ANSWER_LETTERS = ("A", "B", "C", "D")

REQUIRED_PAYLOAD_FIELDS = ("questionText", "answerChoices", "correctAnswer")


class QuestionParseError(Exception):
    """LLM output could not be turned into a Question."""

    pass


def _current_year() -> int:
    return datetime.now(timezone.utc).year


@dataclass
class Question:
    """A multiple-choice STAAR practice question."""

    grade: int
    subject: str
    teks_standard: str
    question_text: str
    answer_choices: list[str]
    correct_answer: str
    explanation: str = ""
    category: str = ""
    difficulty: str = "medium"
    is_from_real_staar: bool = False
    year: int = field(default_factory=_current_year)
    has_image: bool = False
    image_description: str | None = None
    question_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (snake_case) for storage."""
        return {
            "question_id": self.question_id,
            "grade": self.grade,
            "subject": self.subject,
            "teks_standard": self.teks_standard,
            "question_text": self.question_text,
            "answer_choices": list(self.answer_choices),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "category": self.category,
            "difficulty": self.difficulty,
            "is_from_real_staar": self.is_from_real_staar,
            "year": self.year,
            "has_image": self.has_image,
            "image_description": self.image_description,
        }

    def to_payload(self) -> dict[str, Any]:
        """Convert to the camelCase wire form used by the web client."""
        return {
            "id": self.question_id,
            "grade": self.grade,
            "subject": self.subject,
            "teksStandard": self.teks_standard,
            "questionText": self.question_text,
            "answerChoices": list(self.answer_choices),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "category": self.category,
            "difficulty": self.difficulty,
            "isFromRealSTAAR": self.is_from_real_staar,
            "year": self.year,
            "hasImage": self.has_image,
            "imageDescription": self.image_description,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Question:
        """Build a Question from its camelCase wire form."""
        subject = data.get("subject", "math")
        return cls(
            grade=int(data.get("grade", 0)),
            subject=subject,
            teks_standard=data.get("teksStandard", ""),
            question_text=data.get("questionText") or "",
            answer_choices=list(data.get("answerChoices") or []),
            correct_answer=data.get("correctAnswer") or "",
            explanation=data.get("explanation") or "",
            category=data.get("category") or default_category(subject),
            difficulty=data.get("difficulty") or "medium",
            is_from_real_staar=bool(data.get("isFromRealSTAAR", False)),
            year=int(data.get("year") or _current_year()),
            has_image=bool(data.get("hasImage", False)),
            image_description=data.get("imageDescription"),
            question_id=data.get("id"),
        )


def build_staar_prompt(
    grade: int,
    subject: str,
    teks_standard: str,
    category: str | None = None,
) -> str:
    """Build the question-generation prompt for one TEKS standard."""
    return get_prompt(
        "questions/staar_question",
        grade=grade,
        subject=subject,
        teks_standard=teks_standard,
        category=category or default_category(subject),
    )


def question_from_llm_data(
    data: dict[str, Any],
    grade: int,
    subject: str,
    teks_standard: str,
    category: str | None = None,
) -> Question:
    """Combine parsed LLM JSON with the request context.

    Raises:
        QuestionParseError: If a required field is missing
    """
    missing = [name for name in REQUIRED_PAYLOAD_FIELDS if not data.get(name)]
    if missing:
        raise QuestionParseError(f"LLM response missing fields: {', '.join(missing)}")

    choices = data["answerChoices"]
    if not isinstance(choices, list):
        raise QuestionParseError("answerChoices must be a list")

    return Question(
        grade=grade,
        subject=subject,
        teks_standard=teks_standard,
        question_text=str(data["questionText"]).strip(),
        answer_choices=[str(choice) for choice in choices],
        correct_answer=str(data["correctAnswer"]).strip().upper(),
        explanation=str(data.get("explanation") or "").strip(),
        category=category or default_category(subject),
        difficulty="medium",
        is_from_real_staar=False,
        has_image=bool(data.get("hasImage") or False),
        image_description=data.get("imageDescription"),
    )


def parse_question_response(
    content: str,
    grade: int,
    subject: str,
    teks_standard: str,
    category: str | None = None,
) -> Question:
    """Parse raw LLM text into a Question.

    Raises:
        QuestionParseError: If content holds no JSON object or lacks fields
    """
    data = parse_json_content(content)
    if data is None:
        raise QuestionParseError("LLM response is not a JSON object")

    return question_from_llm_data(data, grade, subject, teks_standard, category)
