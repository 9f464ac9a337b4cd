"""FastAPI dependency providers.

Routes receive their LLM-backed services through these providers so
tests can swap them with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends

from staarkids.core.question_generator import QuestionGenerator
from staarkids.core.tutor import NovaTutor
from staarkids.llm.client import LLMClient


def get_llm_client() -> Generator[LLMClient, None, None]:
    """One LLM client per request, closed afterwards."""
    client = LLMClient()
    try:
        yield client
    finally:
        client.close()


def get_generator(client: LLMClient = Depends(get_llm_client)) -> QuestionGenerator:
    return QuestionGenerator(client=client)


def get_tutor(client: LLMClient = Depends(get_llm_client)) -> NovaTutor:
    return NovaTutor(client=client)
