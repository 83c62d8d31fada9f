from __future__ import annotations  # Backend selection for the LLM gateway

import logging

from config import OPENAI_COMPATIBLE_PROVIDERS, Settings, route_for_provider

from .llm_gateway import HttpClient, HttpLlmClient, LlmClient
from .mock import MockLlmClient

logger = logging.getLogger(__name__)


def build_client(cfg: Settings, *, http_client: HttpClient | None = None) -> LlmClient:  # Pick the backend named by LLM_PROVIDER
    provider = (cfg.LLM_PROVIDER or "mock").strip().lower()
    if provider == "mock":
        logger.info("Using mock LLM client")
        return MockLlmClient()
    if provider in OPENAI_COMPATIBLE_PROVIDERS or provider == "azure":
        route = route_for_provider(
            provider,
            base_url=cfg.LLM_BASE_URL,
            model=cfg.LLM_MODEL,
            api_key=cfg.LLM_API_KEY,
            timeout_s=cfg.LLM_TIMEOUT_S,
            sequential=cfg.LLM_SEQUENTIAL,
        )
        logger.info("Using %s LLM client model=%s base_url=%s", provider, route.model, route.base_url)
        return HttpLlmClient(route, client=http_client)
    logger.warning("Unknown LLM provider '%s', defaulting to mock client", provider)
    return MockLlmClient()
