"""Simple span helper for timing LLM round trips."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from .logger import log_event


@contextmanager
def span(name: str, session_id: str) -> Iterator[None]:
    start = time.time()
    outcome = "ok"
    try:
        yield
    except BaseException:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event("span", session_id, span=name, ms=elapsed_ms, reason=outcome)


__all__ = ["span"]
