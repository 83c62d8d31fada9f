"""FastAPI dependencies wiring settings to repositories, the LLM client and the state machine."""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from config.settings import settings
from interview_session import SessionStateMachine
from llm_gateway import LlmClient, build_client
from storage import Repositories, build_repositories


@lru_cache(maxsize=1)
def get_repositories() -> Repositories:
    return build_repositories(settings)


@lru_cache(maxsize=1)
def get_llm_client() -> LlmClient:
    return build_client(settings)


def get_state_machine(
    repos: Repositories = Depends(get_repositories),
    client: LlmClient = Depends(get_llm_client),
) -> SessionStateMachine:
    return SessionStateMachine(
        repos.sessions,
        repos.reports,
        client,
        evaluation_max_tokens=settings.EVALUATION_MAX_TOKENS,
        report_max_tokens=settings.REPORT_MAX_TOKENS,
    )
