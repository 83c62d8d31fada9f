import os
import random
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from interview_session import SessionStateMachine
from llm_gateway import MockLlmClient
from models import Question
from storage import Repositories, memory_repositories
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def repos() -> Repositories:
    return memory_repositories()


@pytest.fixture
def mock_llm() -> MockLlmClient:
    return MockLlmClient()


@pytest.fixture
def machine(repos: Repositories, mock_llm: MockLlmClient) -> SessionStateMachine:
    return SessionStateMachine(repos.sessions, repos.reports, mock_llm, rng=random.Random(7))


@pytest.fixture
def sample_questions() -> list[Question]:
    return [
        Question(type="technical", difficulty=3, text="Explain the CAP theorem.", tags=["distributed"]),
        Question(type="background", difficulty=2, text="Tell me about a project you led."),
        Question(type="technical", difficulty=4, text="How would you shard a write-heavy table?"),
    ]
