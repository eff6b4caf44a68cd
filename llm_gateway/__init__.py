from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    GatewayProvider,
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    LlmTimeoutError,
    TextProvider,
    generate_text,
)

__all__ = [
    "GatewayProvider",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "LlmTimeoutError",
    "TextProvider",
    "generate_text",
]
