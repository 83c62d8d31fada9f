from __future__ import annotations  # Re-export llm_gateway public API

from .factory import build_client
from .llm_gateway import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    HttpClient,
    HttpLlmClient,
    HttpResponse,
    LlmClient,
    LlmGatewayError,
)
from .mock import MockLlmClient

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "HttpClient",
    "HttpLlmClient",
    "HttpResponse",
    "LlmClient",
    "LlmGatewayError",
    "MockLlmClient",
    "build_client",
]
