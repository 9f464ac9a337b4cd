"""Core business logic.

Modules:
- teks: TEKS standards catalogue
- questions: question shape, STAAR prompt and response parsing
- question_validator: structural and arithmetic checks
- question_generator: LLM generation with built-in bank fallback
- question_bank: canned pattern questions
- scoring: accuracy, blended averages and exam grading
- tutor: Nova chat tutor
"""

__all__ = [
    "teks",
    "questions",
    "question_validator",
    "question_generator",
    "question_bank",
    "scoring",
    "tutor",
]
