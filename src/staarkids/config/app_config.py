"""Application configuration loader.

Loads configuration from config/staarkids.yaml with built-in defaults.
Environment variables override the file for LLM and database settings.

Usage:
    from staarkids.config.app_config import load_app_config

    config = load_app_config()
    config.llm.provider  # "openai"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("config/staarkids.yaml")

DEFAULT_DB_PATH = Path("db/staarkids.db")

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4",
    "anthropic": "claude-3-sonnet-20240229",
    "huggingface": "microsoft/DialoGPT-large",
    "ollama": "llama2",
}


def get_default_model(provider: str) -> str:
    """Get the default model name for a provider."""
    return DEFAULT_MODELS.get(provider, "gpt-4")


@dataclass
class LLMSettings:
    """Settings for the question-generation LLM."""

    provider: str = "openai"
    api_key: str | None = None
    api_url: str | None = None
    model: str = "gpt-4"
    max_tokens: int = 1200
    temperature: float = 0.7
    timeout: int = 60


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    db_path: Path = DEFAULT_DB_PATH
    grades: list[int] = field(default_factory=lambda: [3, 4, 5])
    subjects: list[str] = field(default_factory=lambda: ["math", "reading"])


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "provider": "openai",
            "api_url": None,
            "model": None,
            "max_tokens": 1200,
            "temperature": 0.7,
            "timeout": 60,
        },
        "database": {
            "path": str(DEFAULT_DB_PATH),
        },
        "grades": [3, 4, 5],
        "subjects": ["math", "reading"],
    }


def _env_number(name: str, cast: type, current: Any) -> Any:
    """Read a numeric env var, keeping the current value if it doesn't parse."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return current
    try:
        return cast(raw)
    except ValueError:
        logger.warning("invalid_env_value", name=name, value=raw)
        return current


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay LLM_* and STAARKIDS_* environment variables on file data."""
    llm = dict(data.get("llm") or {})

    if os.environ.get("LLM_PROVIDER"):
        llm["provider"] = os.environ["LLM_PROVIDER"]
    if os.environ.get("LLM_API_URL"):
        llm["api_url"] = os.environ["LLM_API_URL"]
    if os.environ.get("LLM_MODEL"):
        llm["model"] = os.environ["LLM_MODEL"]

    llm["api_key"] = (
        os.environ.get("LLM_API_KEY")
        or os.environ.get("OPENAI_API_KEY")
        or llm.get("api_key")
    )
    llm["max_tokens"] = _env_number("LLM_MAX_TOKENS", int, llm.get("max_tokens", 1200))
    llm["temperature"] = _env_number(
        "LLM_TEMPERATURE", float, llm.get("temperature", 0.7)
    )

    database = dict(data.get("database") or {})
    if os.environ.get("STAARKIDS_DB_PATH"):
        database["path"] = os.environ["STAARKIDS_DB_PATH"]

    return {**data, "llm": llm, "database": database}


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    llm_data = data.get("llm", {})
    provider = llm_data.get("provider") or "openai"

    llm = LLMSettings(
        provider=provider,
        api_key=llm_data.get("api_key"),
        api_url=llm_data.get("api_url"),
        model=llm_data.get("model") or get_default_model(provider),
        max_tokens=int(llm_data.get("max_tokens", 1200)),
        temperature=float(llm_data.get("temperature", 0.7)),
        timeout=int(llm_data.get("timeout", 60)),
    )

    db_path = Path(data.get("database", {}).get("path") or DEFAULT_DB_PATH)

    return AppConfig(
        llm=llm,
        db_path=db_path,
        grades=list(data.get("grades", [3, 4, 5])),
        subjects=list(data.get("subjects", ["math", "reading"])),
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data = _get_defaults()

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        file_data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        for key, value in file_data.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
    else:
        logger.info("using_default_config")

    _cached_config = _parse_config(_apply_env_overrides(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
