"""LLM client for question generation and tutoring.

Provides a unified interface over several LLM HTTP APIs so the rest of
the application never deals with provider-specific payloads.

Supported providers:
- openai: OpenAI Chat Completions (via the official SDK)
- anthropic: Anthropic Messages API
- huggingface: Hugging Face Inference API (text generation)
- ollama: Local Ollama server (/api/generate)
- custom: Any HTTP endpoint accepting {prompt, model, max_tokens, temperature}
"""

from __future__ import annotations

import json
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal

import httpx
import structlog
from openai import APIConnectionError, APIStatusError, OpenAI, OpenAIError

from staarkids.config.app_config import LLMSettings, _env_number, get_default_model

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["openai", "anthropic", "huggingface", "ollama", "custom"]

SUPPORTED_PROVIDERS: tuple[str, ...] = (
    "openai",
    "anthropic",
    "huggingface",
    "ollama",
    "custom",
)

OPENAI_BASE_URL = "https://api.openai.com/v1"
ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
HUGGINGFACE_MODELS_URL = "https://api-inference.huggingface.co/models"
OLLAMA_GENERATE_URL = "http://localhost:11434/api/generate"

# Approximate USD per 1K tokens
COST_PER_1K_TOKENS: dict[str, float] = {
    "openai": 0.03,
    "anthropic": 0.015,
}

# Providers that refuse to run without an API key
KEY_REQUIRED = {
    "openai": "OpenAI API key required",
    "anthropic": "Anthropic API key required",
    "huggingface": "Hugging Face API key required",
}

JSON_REPAIR_PROMPT = """Fix the following text and return ONLY valid JSON:
<<<
{invalid_output}
>>>

Reply with the corrected JSON object only, no explanations or markdown."""

# Some models emit <think>...</think> blocks that break JSON extraction
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def _sanitize_for_json(text: str) -> str:
    """Remove thinking/reasoning tags before JSON parsing."""
    result = text
    for pattern in SANITIZE_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def parse_json_content(content: str) -> dict[str, Any] | None:
    """Parse a JSON object out of raw LLM output.

    Tries:
    1. Direct parse
    2. Extract from ```json ... ``` blocks
    3. Extract first {...} object

    Returns the parsed dict, or None if every strategy fails.
    """
    content = _sanitize_for_json(content)

    candidates = [content]

    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
    if fenced:
        candidates.append(fenced.group(1).strip())

    start = content.find("{")
    end = content.rfind("}") + 1
    if start >= 0 and end > start:
        candidates.append(content[start:end])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    return None


def estimate_cost(provider: str, tokens: int) -> float:
    """Rough cost estimate in USD for a number of tokens."""
    return (tokens / 1000) * COST_PER_1K_TOKENS.get(provider, 0.0)


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: Provider = "openai"
    model: str = "gpt-4"
    api_key: str | None = None
    api_url: str | None = None
    max_tokens: int = 1200
    temperature: float = 0.7
    timeout: int = 60

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> LLMConfig:
        """Build client config from application settings."""
        return cls(
            provider=settings.provider,  # type: ignore[arg-type]
            model=settings.model or get_default_model(settings.provider),
            api_key=settings.api_key,
            api_url=settings.api_url,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout=settings.timeout,
        )

    @classmethod
    def from_env(cls) -> LLMConfig:
        """Build client config purely from LLM_* environment variables."""
        provider = os.environ.get("LLM_PROVIDER") or "openai"
        return cls(
            provider=provider,  # type: ignore[arg-type]
            model=os.environ.get("LLM_MODEL") or get_default_model(provider),
            api_key=os.environ.get("LLM_API_KEY") or os.environ.get("OPENAI_API_KEY"),
            api_url=os.environ.get("LLM_API_URL"),
            max_tokens=_env_number("LLM_MAX_TOKENS", int, 1200),
            temperature=_env_number("LLM_TEMPERATURE", float, 0.7),
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    tokens_used: int = 0
    cost: float = 0.0
    latency_ms: int = 0


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConfigurationError(LLMError):
    """Client is missing a key, URL, or uses an unknown provider."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(data: Any) -> str | None:
    """Pull a readable message out of a provider error body."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return None


def _flatten_messages(messages: list[Message]) -> str:
    """Collapse a conversation into one prompt for completion-style APIs."""
    if len(messages) == 1:
        return messages[0].content
    return "\n\n".join(f"{m.role.capitalize()}: {m.content}" for m in messages)


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for LLM interactions.

    One instance talks to exactly one provider. Every call either returns
    an LLMResponse with non-empty content or raises an LLMError subclass.
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        http_client: httpx.Client | None = None,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (built from app config if not provided)
            http_client: Optional httpx client (for testing)
        """
        if config is None:
            from staarkids.config.app_config import load_app_config

            config = LLMConfig.from_settings(load_app_config().llm)

        self.config = config
        self._http = http_client or httpx.Client(timeout=config.timeout)
        self._owns_http = http_client is None
        self._openai: OpenAI | None = None

        self._handlers: dict[str, Callable[..., LLMResponse]] = {
            "openai": self._call_openai,
            "anthropic": self._call_anthropic,
            "huggingface": self._call_huggingface,
            "ollama": self._call_ollama,
            "custom": self._call_custom,
        }

        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            api_url=self.config.api_url,
        )

    def __enter__(self) -> LLMClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        if self._owns_http:
            self._http.close()
        if self._openai is not None:
            self._openai.close()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def chat(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send a conversation to the configured provider.

        Args:
            messages: List of messages in conversation
            max_tokens: Override default max tokens
            temperature: Override default temperature
            json_mode: Ask for a JSON object (OpenAI only; ignored elsewhere)

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConfigurationError: If the provider is unsupported or a required
                key or URL is missing
            LLMConnectionError: If the server cannot be reached
            LLMResponseError: If the server rejects the call or replies with nothing
        """
        if max_tokens is None:
            max_tokens = self.config.max_tokens
        if temperature is None:
            temperature = self.config.temperature

        if self.config.provider not in SUPPORTED_PROVIDERS:
            raise LLMConfigurationError(f"Unsupported LLM provider: {self.config.provider}")

        required = KEY_REQUIRED.get(self.config.provider)
        if required and not self.config.api_key:
            raise LLMConfigurationError(required)

        handler = self._handlers[self.config.provider]

        start_time = time.time()
        response = handler(messages, max_tokens, temperature, json_mode)
        response.latency_ms = int((time.time() - start_time) * 1000)

        if not response.content:
            raise LLMResponseError(f"Empty response from {self.config.provider}")

        logger.debug(
            "llm_response",
            provider=response.provider,
            model=response.model,
            tokens=response.tokens_used,
            latency_ms=response.latency_ms,
        )

        return response

    def complete(self, prompt: str, json_mode: bool = False) -> LLMResponse:
        """Single-turn completion of a user prompt."""
        return self.chat([Message(role="user", content=prompt)], json_mode=json_mode)

    def complete_json(self, prompt: str, max_retries: int = 1) -> dict[str, Any]:
        """Send a prompt expecting a JSON object back.

        Retries once with a repair prompt when the first reply cannot be parsed.

        Raises:
            LLMResponseError: If no JSON object can be recovered
        """
        response = self.complete(prompt, json_mode=True)

        parsed = parse_json_content(response.content)
        if parsed is not None:
            return parsed

        if max_retries > 0:
            logger.warning(
                "json_parse_failed_retrying",
                content=response.content[:100],
                provider=self.config.provider,
            )

            retry_messages = [
                Message(role="user", content=prompt),
                Message(role="assistant", content=response.content),
                Message(
                    role="user",
                    content=JSON_REPAIR_PROMPT.format(
                        invalid_output=response.content[:1000]
                    ),
                ),
            ]
            retry_response = self.chat(retry_messages, json_mode=True)

            parsed = parse_json_content(retry_response.content)
            if parsed is not None:
                logger.info("json_parse_recovered_after_retry")
                return parsed

        raise LLMResponseError(
            f"Could not obtain valid JSON: {response.content[:200]}..."
        )

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------

    def _get_openai(self) -> OpenAI:
        if self._openai is None:
            self._openai = OpenAI(
                api_key=self.config.api_key,
                base_url=self.config.api_url or OPENAI_BASE_URL,
                timeout=self.config.timeout,
            )
        return self._openai

    def _call_openai(
        self,
        messages: list[Message],
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> LLMResponse:
        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            request_kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._get_openai().chat.completions.create(**request_kwargs)
        except APIConnectionError as e:
            raise LLMConnectionError(f"OpenAI request failed: {e}") from e
        except APIStatusError as e:
            raise LLMResponseError(
                _error_message(e.body) or e.message or "OpenAI API error",
                status_code=e.status_code,
            ) from e
        except OpenAIError as e:
            raise LLMError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise LLMResponseError("Empty response from openai")

        tokens = response.usage.total_tokens if response.usage else 0

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider="openai",
            tokens_used=tokens,
            cost=estimate_cost("openai", tokens),
        )

    def _post_json(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
        label: str = "LLM",
    ) -> Any:
        """POST a JSON body and return the decoded JSON reply."""
        try:
            response = self._http.post(url, json=body, headers=headers or {})
        except httpx.RequestError as e:
            raise LLMConnectionError(f"{label} request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            raise LLMResponseError(
                _error_message(data) or f"{label} API error",
                status_code=response.status_code,
            )

        if data is None:
            raise LLMResponseError(f"{label} returned a non-JSON body")

        return data

    def _call_anthropic(
        self,
        messages: list[Message],
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> LLMResponse:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        body: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [m.to_dict() for m in messages if m.role != "system"],
        }
        if system:
            body["system"] = system

        data = self._post_json(
            self.config.api_url or ANTHROPIC_MESSAGES_URL,
            body,
            headers={
                "x-api-key": self.config.api_key or "",
                "anthropic-version": ANTHROPIC_VERSION,
            },
            label="Anthropic",
        )

        try:
            content = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMResponseError(f"Unexpected Anthropic response: {data}") from e

        tokens = (data.get("usage") or {}).get("output_tokens") or 0

        return LLMResponse(
            content=content or "",
            model=data.get("model", self.config.model),
            provider="anthropic",
            tokens_used=tokens,
            cost=estimate_cost("anthropic", tokens),
        )

    def _call_huggingface(
        self,
        messages: list[Message],
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> LLMResponse:
        url = self.config.api_url or f"{HUGGINGFACE_MODELS_URL}/{self.config.model}"
        data = self._post_json(
            url,
            {
                "inputs": _flatten_messages(messages),
                "parameters": {
                    "max_new_tokens": max_tokens,
                    "temperature": temperature,
                    "return_full_text": False,
                },
            },
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            label="Hugging Face",
        )

        content = None
        tokens = 0
        if isinstance(data, list) and data and isinstance(data[0], dict):
            content = data[0].get("generated_text")
        elif isinstance(data, dict):
            content = data.get("generated_text")
            tokens = len((data.get("details") or {}).get("tokens") or [])

        return LLMResponse(
            content=content or "",
            model=self.config.model,
            provider="huggingface",
            tokens_used=tokens,
        )

    def _call_ollama(
        self,
        messages: list[Message],
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> LLMResponse:
        data = self._post_json(
            self.config.api_url or OLLAMA_GENERATE_URL,
            {
                "model": self.config.model,
                "prompt": _flatten_messages(messages),
                "stream": False,
                "options": {
                    "temperature": temperature,
                    "num_predict": max_tokens,
                },
            },
            label="Ollama",
        )

        if not isinstance(data, dict):
            raise LLMResponseError(f"Unexpected Ollama response: {data}")

        return LLMResponse(
            content=data.get("response") or "",
            model=data.get("model", self.config.model),
            provider="ollama",
            tokens_used=data.get("eval_count") or 0,
        )

    def _call_custom(
        self,
        messages: list[Message],
        max_tokens: int,
        temperature: float,
        json_mode: bool,
    ) -> LLMResponse:
        if not self.config.api_url:
            raise LLMConfigurationError("Custom API URL required")

        headers = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        data = self._post_json(
            self.config.api_url,
            {
                "prompt": _flatten_messages(messages),
                "model": self.config.model,
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
            headers=headers,
            label="Custom",
        )

        if not isinstance(data, dict):
            raise LLMResponseError(f"Unexpected custom API response: {data}")

        return LLMResponse(
            content=data.get("response") or data.get("content") or data.get("text") or "",
            model=self.config.model,
            provider="custom",
            tokens_used=data.get("tokens_used") or 0,
            cost=float(data.get("cost") or 0),
        )
