"""Persistence layer: repository contracts plus SQLite and in-memory backends."""
from __future__ import annotations

from dataclasses import dataclass

from config import Settings

from .memory import MemoryDatabase, MemoryQuestionRepository, MemoryReportRepository, MemorySessionRepository
from .questions import SqliteQuestionRepository
from .reports import SqliteReportRepository
from .repositories import QuestionRepository, ReportRepository, SessionRepository
from .sessions import SqliteSessionRepository


@dataclass(frozen=True)
class Repositories:
    sessions: SessionRepository
    reports: ReportRepository
    questions: QuestionRepository


def memory_repositories() -> Repositories:
    db = MemoryDatabase()
    return Repositories(
        sessions=MemorySessionRepository(db),
        reports=MemoryReportRepository(db),
        questions=MemoryQuestionRepository(db),
    )


def sqlite_repositories(db_path: str) -> Repositories:
    return Repositories(
        sessions=SqliteSessionRepository(db_path),
        reports=SqliteReportRepository(db_path),
        questions=SqliteQuestionRepository(db_path),
    )


def build_repositories(cfg: Settings) -> Repositories:
    """Build the repositories named by ``STORAGE_BACKEND``."""

    if cfg.STORAGE_BACKEND == "memory":
        return memory_repositories()
    return sqlite_repositories(cfg.DB_PATH)


__all__ = [
    "MemoryDatabase",
    "MemoryQuestionRepository",
    "MemoryReportRepository",
    "MemorySessionRepository",
    "QuestionRepository",
    "ReportRepository",
    "Repositories",
    "SessionRepository",
    "SqliteQuestionRepository",
    "SqliteReportRepository",
    "SqliteSessionRepository",
    "build_repositories",
    "memory_repositories",
    "sqlite_repositories",
]
