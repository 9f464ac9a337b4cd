"""Nova, the chat tutor.

Nova answers free-form student messages with the student's practice
accuracy folded into the prompt. Provider failures never reach the
student: they get the canned greeting instead.
"""

from __future__ import annotations

import structlog

from staarkids.db.attempts_repository import get_overall_accuracy
from staarkids.llm.client import LLMClient, LLMError, Message
from staarkids.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

NOVA_MAX_TOKENS = 300
NOVA_TEMPERATURE = 0.7

FALLBACK_REPLY = (
    "Hi there! I'm Nova, your learning buddy! I'm here to help you with your "
    "STAAR test prep. I love giving detailed explanations and celebrating your "
    "progress with StarPower rewards! What would you like to work on today?"
)


def build_nova_prompt(
    grade: int,
    message: str,
    math_accuracy: int = 0,
    reading_accuracy: int = 0,
    total_attempts: int = 0,
) -> str:
    return get_prompt(
        "tutor/nova",
        grade=grade,
        message=message,
        math_accuracy=math_accuracy,
        reading_accuracy=reading_accuracy,
        total_attempts=total_attempts,
    )


class NovaTutor:
    """Chat tutor backed by the configured LLM provider."""

    def __init__(self, client: LLMClient | None = None):
        self._client = client

    @property
    def client(self) -> LLMClient:
        if self._client is None:
            self._client = LLMClient()
        return self._client

    def reply(self, user_id: str | None, grade: int, message: str) -> str:
        """Answer a student message.

        Args:
            user_id: Student whose accuracy goes into the prompt (None for a guest)
            grade: Student grade
            message: What the student typed

        Returns:
            Nova's answer, or FALLBACK_REPLY when the provider fails
        """
        if user_id:
            accuracy = get_overall_accuracy(user_id)
            prompt = build_nova_prompt(
                grade,
                message,
                math_accuracy=accuracy.math_accuracy,
                reading_accuracy=accuracy.reading_accuracy,
                total_attempts=accuracy.total_attempts,
            )
        else:
            prompt = build_nova_prompt(grade, message)

        try:
            response = self.client.chat(
                [Message(role="user", content=prompt)],
                max_tokens=NOVA_MAX_TOKENS,
                temperature=NOVA_TEMPERATURE,
            )
        except LLMError as e:
            logger.warning("nova_reply_failed", user_id=user_id, error=str(e))
            return FALLBACK_REPLY

        content = response.content.strip()
        if not content:
            return FALLBACK_REPLY

        logger.info("nova_replied", user_id=user_id, tokens=response.tokens_used)
        return content
