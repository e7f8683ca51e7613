"""Utility helpers for DoodleSolve."""

from .config_loader import (
    AppConfig,
    ConfigError,
    load_app_config,
    load_knowledge_entries,
    load_prompts_registry,
    render_prompt_template,
)
from .logger import configure_logging, get_logger

__all__ = [
    "AppConfig",
    "ConfigError",
    "load_app_config",
    "load_knowledge_entries",
    "load_prompts_registry",
    "render_prompt_template",
    "configure_logging",
    "get_logger",
]
