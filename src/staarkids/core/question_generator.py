"""STAAR question generation.

Responsibilities:
- Build the STAAR prompt for a grade/subject/TEKS standard
- Send it through the LLM client and parse the JSON reply
- Drop replies that fail validation
- Fall back to the built-in question bank when the LLM yields nothing
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal

import structlog

from staarkids.core.question_bank import pattern_questions
from staarkids.core.question_validator import ValidationResult, validate_question
from staarkids.core.questions import (
    Question,
    QuestionParseError,
    build_staar_prompt,
    question_from_llm_data,
)
from staarkids.core.teks import get_teks_standards, random_teks_standard
from staarkids.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

GenerationMethod = Literal["llm", "standard"]

MAX_QUESTIONS_PER_REQUEST = 20


@dataclass
class TargetedRequest:
    """Generation request pinned to specific TEKS standards."""

    grade: int
    subject: str
    teks_standards: list[str]
    categories: list[str] = field(default_factory=list)
    difficulty: Literal["easy", "medium", "hard"] | None = None


class QuestionGenerator:
    """Generates STAAR questions through an LLM client.

    LLM and parse failures never escape: they are logged and the
    question is skipped (None for single-question calls).
    """

    def __init__(
        self,
        client: LLMClient | None = None,
        rng: random.Random | None = None,
        validate: bool = True,
    ):
        self._client = client
        self._rng = rng or random.Random()
        self._validate = validate

    @property
    def client(self) -> LLMClient:
        if self._client is None:
            self._client = LLMClient()
        return self._client

    def validate_question(self, question: Question) -> ValidationResult:
        return validate_question(question)

    def generate_question(
        self,
        grade: int,
        subject: str,
        teks_standard: str,
        category: str | None = None,
    ) -> Question | None:
        """Generate one question for a TEKS standard.

        Returns:
            The parsed question, or None if the LLM call, parsing, or
            validation failed.
        """
        prompt = build_staar_prompt(grade, subject, teks_standard, category)

        try:
            data = self.client.complete_json(prompt)
            question = question_from_llm_data(data, grade, subject, teks_standard, category)
        except (LLMError, QuestionParseError) as e:
            logger.warning(
                "question_generation_failed",
                grade=grade,
                subject=subject,
                teks_standard=teks_standard,
                error=str(e),
            )
            return None

        if self._validate:
            result = validate_question(question)
            if not result.is_valid:
                logger.warning(
                    "generated_question_rejected",
                    teks_standard=teks_standard,
                    issues=result.issues,
                )
                return None

        return question

    def generate_questions(
        self,
        grade: int,
        subject: str,
        count: int = 5,
        category: str | None = None,
    ) -> list[Question]:
        """Generate up to count questions, cycling through the TEKS catalogue."""
        standards = get_teks_standards(grade, subject)
        questions = []

        for i in range(count):
            question = self.generate_question(
                grade, subject, standards[i % len(standards)], category
            )
            if question is not None:
                questions.append(question)

        logger.info(
            "questions_generated",
            grade=grade,
            subject=subject,
            requested=count,
            generated=len(questions),
        )
        return questions

    def generate_single_question(
        self,
        grade: int,
        subject: str,
        teks_standard: str | None = None,
        category: str | None = None,
    ) -> Question | None:
        """Generate one question, picking a random TEKS standard if none is given."""
        standard = teks_standard or random_teks_standard(grade, subject, self._rng)
        return self.generate_question(grade, subject, standard, category)

    def generate_targeted_questions(self, request: TargetedRequest) -> list[Question]:
        """Generate one question per requested TEKS standard."""
        questions = []

        for teks_standard in request.teks_standards:
            category = (
                self._rng.choice(request.categories) if request.categories else None
            )
            question = self.generate_question(
                request.grade, request.subject, teks_standard, category
            )
            if question is None:
                continue
            if request.difficulty:
                question.difficulty = request.difficulty
            questions.append(question)

        return questions

    def generate_with_fallback(
        self,
        grade: int,
        subject: str,
        count: int = 1,
        category: str | None = None,
        teks_standard: str | None = None,
    ) -> tuple[list[Question], GenerationMethod]:
        """Generate questions, falling back to the built-in bank.

        Returns:
            (questions, method) where method is "llm" when the LLM produced
            at least one question and "standard" otherwise.
        """
        count = max(1, min(count, MAX_QUESTIONS_PER_REQUEST))

        if teks_standard:
            questions = self.generate_targeted_questions(
                TargetedRequest(
                    grade=grade,
                    subject=subject,
                    teks_standards=[teks_standard] * count,
                    categories=[category] if category else [],
                )
            )
        else:
            questions = self.generate_questions(grade, subject, count, category)

        if questions:
            return questions, "llm"

        logger.warning("llm_generation_empty_using_bank", grade=grade, subject=subject)
        fallback = pattern_questions(
            grade,
            subject,
            count,
            category=category,
            teks_standard=teks_standard,
            rng=self._rng,
        )
        return fallback, "standard"
