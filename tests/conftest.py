"""Shared fixtures for STAAR Kids tests.

Tests are grouped by area (llm, core, db, web, cli). Nothing here
touches the network: LLM calls are mocked and every database lives
under tmp_path.
"""

from unittest.mock import MagicMock

import pytest

from staarkids.config.app_config import clear_config_cache
from staarkids.core.questions import Question
from staarkids.db.database import init_db

LLM_ENV_VARS = (
    "LLM_PROVIDER",
    "LLM_API_KEY",
    "OPENAI_API_KEY",
    "LLM_API_URL",
    "LLM_MODEL",
    "LLM_MAX_TOKENS",
    "LLM_TEMPERATURE",
    "STAARKIDS_DB_PATH",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate every test from the developer's LLM settings."""
    for name in LLM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path):
    """Fresh database with schema, active for the test."""
    path = tmp_path / "staarkids.db"
    init_db(path)
    return path


@pytest.fixture
def math_question() -> Question:
    """Valid grade 4 math question."""
    return Question(
        grade=4,
        subject="math",
        teks_standard="4.4H",
        question_text="A store has 144 apples packed equally into 12 boxes. How many apples are in each box?",
        answer_choices=["A. 10", "B. 11", "C. 12", "D. 14"],
        correct_answer="C",
        explanation="Divide the apples among the boxes: 144 ÷ 12 = 12 apples in each box.",
        category="Number Operations",
    )


@pytest.fixture
def reading_question() -> Question:
    """Valid grade 4 reading question."""
    return Question(
        grade=4,
        subject="reading",
        teks_standard="4.6B",
        question_text="In the story, why does the main character decide to stay home from the fair?",
        answer_choices=[
            "A. She is sick",
            "B. She wants to care for her dog",
            "C. It is raining",
            "D. She has no money",
        ],
        correct_answer="B",
        explanation="The story says she will not leave her dog alone after it hurt its paw.",
        category="Comprehension",
    )


@pytest.fixture
def llm_question_data() -> dict:
    """Parsed JSON as returned by the LLM for a math question."""
    return {
        "questionText": "Ben has 3 bags with 15 marbles in each bag. How many marbles does he have?",
        "answerChoices": ["A. 18", "B. 35", "C. 45", "D. 50"],
        "correctAnswer": "c",
        "explanation": "Multiply the bags by the marbles in each: 3 × 15 = 45 marbles.",
        "hasImage": False,
        "imageDescription": None,
    }


@pytest.fixture
def mock_llm_client(llm_question_data):
    """Mock LLM client whose complete_json returns a valid question."""
    client = MagicMock()
    client.config = MagicMock()
    client.config.provider = "openai"
    client.config.model = "gpt-4"
    client.complete_json.return_value = llm_question_data
    return client
