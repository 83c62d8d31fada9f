"""Application settings and configuration management."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    STORAGE_BACKEND: Literal["sqlite", "memory"] = "sqlite"

    LLM_PROVIDER: str = "mock"
    LLM_BASE_URL: Optional[str] = None
    LLM_MODEL: Optional[str] = None
    LLM_API_KEY: Optional[str] = None
    LLM_TIMEOUT_S: float = Field(default=120.0, ge=0.1)
    LLM_SEQUENTIAL: bool = False

    QUESTION_GEN_MAX_TOKENS: int = Field(default=2048, ge=1)
    EVALUATION_MAX_TOKENS: int = Field(default=800, ge=1)
    REPORT_MAX_TOKENS: int = Field(default=2048, ge=1)

    CLIENT_ORIGIN: str = "http://localhost:5173"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
