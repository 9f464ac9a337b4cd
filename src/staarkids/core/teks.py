"""TEKS standards catalogue.

TEKS (Texas Essential Knowledge and Skills) codes look like "4.2A":
grade, knowledge-and-skills statement, optional student expectation letter.
"""

from __future__ import annotations

import random
import re
from typing import Literal

Subject = Literal["math", "reading"]

GRADES: tuple[int, ...] = (3, 4, 5)
SUBJECTS: tuple[str, ...] = ("math", "reading")

TEKS_PATTERN = re.compile(r"^\d+\.\d+[A-Z]?$")

# Strand number -> expectation letters
_MATH_STRANDS: dict[int, str] = {1: "ABCD", 2: "ABC", 3: "ABC", 4: "ABC", 5: "ABC"}
_READING_STRANDS: dict[int, str] = {6: "ABC", 7: "ABC", 8: "ABC", 9: "ABC", 10: "ABC"}

DEFAULT_CATEGORIES: dict[str, str] = {
    "math": "Problem Solving",
    "reading": "Comprehension",
}


def validate_grade_subject(grade: int, subject: str) -> None:
    """Raise ValueError unless grade and subject are supported."""
    if grade not in GRADES:
        raise ValueError(f"Grade must be one of {', '.join(map(str, GRADES))}: {grade}")
    if subject not in SUBJECTS:
        raise ValueError(f"Subject must be math or reading: {subject}")


def get_teks_standards(grade: int, subject: str) -> list[str]:
    """List the TEKS codes questions are generated against.

    Math covers strands 1-5, reading covers strands 6-10.
    """
    strands = _MATH_STRANDS if subject == "math" else _READING_STRANDS
    return [
        f"{grade}.{strand}{letter}"
        for strand, letters in strands.items()
        for letter in letters
    ]


def random_teks_standard(
    grade: int, subject: str, rng: random.Random | None = None
) -> str:
    """Pick one TEKS code at random for the grade and subject."""
    chooser = rng or random
    return chooser.choice(get_teks_standards(grade, subject))


def is_valid_teks(code: str | None) -> bool:
    """Check a TEKS code against the N.N[A-Z] format."""
    return bool(code) and TEKS_PATTERN.match(code) is not None


def default_category(subject: str) -> str:
    return DEFAULT_CATEGORIES.get(subject, "Comprehension")
