"""In-memory provider registry for agent components."""
from typing import Any, Dict

_REGISTRY: Dict[str, Any] = {}


def bind_model(key: str, provider: Any) -> None:
    """Bind a text provider to a registry key."""
    _REGISTRY[key] = provider


def get_model(key: str) -> Any:
    """Retrieve a provider from the registry.

    Raises:
        KeyError: If no provider has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def has_model(key: str) -> bool:
    return key in _REGISTRY


def clear_models() -> None:
    _REGISTRY.clear()


QUESTION_KEY = "question_generator"
EVALUATION_KEY = "evaluation_engine"
