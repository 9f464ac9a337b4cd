"""Configuration package for STAAR Kids."""

from staarkids.config.app_config import (
    AppConfig,
    LLMSettings,
    clear_config_cache,
    get_default_model,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LLMSettings",
    "clear_config_cache",
    "get_default_model",
    "load_app_config",
]
