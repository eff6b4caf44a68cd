"""Structured logging for session lifecycle events.

Every event is written twice: a one-line human summary (stdout and, when file
logs are on, ``<LOG_FILE>-human.log``) and the full JSON payload to ``LOG_FILE``.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
HUMAN_KEYS = ("span", "owner_id", "status", "question_index", "ms", "score", "outcome", "error")

_logger = logging.getLogger("interview.events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False

_state: dict[str, Any] = {"configured": False, "files": ENABLE_FILE_LOGS}


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _rotating(path: str, *, json_lines: bool) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(logging.Formatter("%(message)s") if json_lines else _human_formatter())
    handler.addFilter(lambda record: getattr(record, "is_json", False) is json_lines)
    return handler


def _human_path(log_file: str) -> str:
    root, ext = os.path.splitext(log_file)
    return f"{root}-human{ext or '.log'}"


def configure_logging(*, log_file: Optional[str] = None, enable_files: Optional[bool] = None) -> None:
    """(Re)build the event handlers; safe to call more than once."""

    for handler in list(_logger.handlers):
        _logger.removeHandler(handler)
        handler.close()

    files = ENABLE_FILE_LOGS if enable_files is None else enable_files
    path = log_file or LOG_FILE

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_human_formatter())
    console.addFilter(lambda record: getattr(record, "is_json", False) is False)
    _logger.addHandler(console)

    if files:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        _logger.addHandler(_rotating(path, json_lines=True))
        _logger.addHandler(_rotating(_human_path(path), json_lines=False))

    _state.update(configured=True, files=files)


def _format_human(evt: dict[str, Any]) -> str:
    parts = [f"session={evt.get('session_id')}", f"kind={evt.get('kind')}"]
    parts.extend(f"{key}={evt[key]}" for key in HUMAN_KEYS if key in evt)
    return " ".join(parts)


def _emit(message: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, logging.INFO, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, **fields: Any) -> None:
    """Record one lifecycle event; extra fields land in the JSON payload."""

    if not _state["configured"]:
        configure_logging()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "session_id": session_id,
    }
    payload.update(fields)

    _emit(_format_human(payload), is_json=False)
    if _state["files"]:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["configure_logging", "log_event"]
