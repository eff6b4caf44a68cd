"""Configuration package for interview practice services."""
from .llm import AppConfig, LlmRoute, load_config, load_route, resolve_route
from .registry import EVALUATION_KEY, QUESTION_KEY, bind_model, clear_models, get_model, has_model
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "load_route",
    "resolve_route",
    "EVALUATION_KEY",
    "QUESTION_KEY",
    "bind_model",
    "clear_models",
    "get_model",
    "has_model",
    "Settings",
    "settings",
]
