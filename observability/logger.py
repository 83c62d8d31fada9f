"""Session event logging.

Every event becomes one human-readable line on stdout. With
``ENABLE_FILE_LOGS`` set, the same line goes to a rotating ``*-human.log``
and the full event payload is appended as JSON to ``LOG_FILE``.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Callable, Dict

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
HUMAN_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Fields shown on the human line, in this order; everything else is JSON-only
HUMAN_FIELDS = ("status", "order_no", "questions", "evaluation", "verdict", "span", "ms", "reason")

_logger = logging.getLogger("interview.events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _is_human(record: logging.LogRecord) -> bool:
    return not _is_json(record)


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt=HUMAN_DATEFMT)


def _human_log_path(path: str) -> str:  # logs/interview.log -> logs/interview-human.log
    root, ext = os.path.splitext(path)
    return f"{root}-human{ext or '.log'}"


def _rotating(path: str, formatter: logging.Formatter, accept: Callable[[logging.LogRecord], bool]) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(accept)
    return handler


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_human_formatter())
    console.addFilter(_is_human)
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    _logger.addHandler(_rotating(LOG_FILE, logging.Formatter("%(message)s"), _is_json))
    _logger.addHandler(_rotating(_human_log_path(LOG_FILE), _human_formatter(), _is_human))


def format_event(event: Dict[str, Any]) -> str:
    line = f"session={event.get('session_id')} kind={event.get('kind')}"
    extras = [f"{key}={event[key]}" for key in HUMAN_FIELDS if key in event]
    return " ".join([line, *extras])


def _emit(message: str, level: int, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, level, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Record one session event such as ``answer_submitted`` or ``report_failed``."""

    _ensure_handlers()

    event: Dict[str, Any] = {
        "ts": time.time(),
        "event_id": uuid.uuid4().hex,
        "kind": kind,
        "session_id": session_id,
        **fields,
    }
    _emit(format_event(event), level, is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(json.dumps(event, ensure_ascii=False, default=str), level, is_json=True)


__all__ = ["format_event", "log_event"]
