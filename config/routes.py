from __future__ import annotations  # Configuration schema for LLM routing

from typing import Dict

from pydantic import BaseModel, Field

OPENAI_COMPATIBLE_PROVIDERS = ("ollama", "vllm", "openai")


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key: str | None = None
    system_preamble: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False


def route_for_provider(
    provider: str,
    *,
    base_url: str | None,
    model: str | None,
    api_key: str | None,
    timeout_s: float,
    sequential: bool = False,
) -> LlmRoute:  # Resolve the HTTP route for a configured provider name
    name = provider.lower()
    if name in OPENAI_COMPATIBLE_PROVIDERS:
        key = api_key if api_key and api_key != "dummy" else None
        return LlmRoute(
            name=name,
            base_url=(base_url or "http://localhost:11434/v1").rstrip("/"),
            endpoint="/chat/completions",
            model=model or "llama2:7b",
            timeout_s=timeout_s,
            api_key=key,
            sequential=sequential,
        )
    if name == "azure":
        if not base_url:
            raise ValueError("LLM_BASE_URL is required for the azure provider")
        if not api_key:
            raise ValueError("LLM_API_KEY is required for the azure provider")
        return LlmRoute(
            name=name,
            base_url=base_url.rstrip("/"),
            endpoint="/v1/chat/completions",
            model=model or "gpt-3.5-turbo",
            timeout_s=timeout_s,
            api_key=api_key,
            system_preamble="You are an interviewer.",
            sequential=sequential,
        )
    raise KeyError(f"No HTTP route for provider '{provider}'")
