"""Structured event log for marathon sessions.

Every event is written as one human line (console and ``*-human.log``) and,
when file logs are enabled, as one JSON line in the rotating ``LOG_FILE``.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Dict, Iterable

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/marathon.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
HUMAN_KEYS = ("company_id", "round_index", "round_type", "score", "warnings", "phase", "outcome")
WARNING_KINDS = frozenset({"session_terminated"})

_logger = logging.getLogger("marathon")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


class _JsonOnly(logging.Filter):  # Route records by their json marker
    def __init__(self, wanted: bool) -> None:
        super().__init__()
        self._wanted = wanted

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, "is_json", False) is self._wanted


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _rotating(path: str, formatter: logging.Formatter, json_lines: bool) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(_JsonOnly(json_lines))
    return handler


def _human_log_path(path: str) -> str:
    stem = path[: -len(".log")] if path.endswith(".log") else path
    return f"{stem}-human.log"


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_human_formatter())
    console.addFilter(_JsonOnly(False))
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    _logger.addHandler(_rotating(LOG_FILE, logging.Formatter("%(message)s"), json_lines=True))
    _logger.addHandler(_rotating(_human_log_path(LOG_FILE), _human_formatter(), json_lines=False))


def _format_human(evt: Dict[str, Any], keys: Iterable[str] = HUMAN_KEYS) -> str:
    parts = [f"owner={evt.get('owner_id')}", f"kind={evt.get('kind')}"]
    parts.extend(f"{key}={evt[key]}" for key in keys if evt.get(key) is not None)
    return " ".join(parts)


def _emit(level: int, message: str, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, level, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, owner_id: str, **fields: Any) -> None:
    """Record a session event such as ``round_submitted`` or ``warning_added``."""

    _ensure_handlers()
    payload: Dict[str, Any] = {"ts": time.time(), "trace": str(uuid.uuid4()), "kind": kind, "owner_id": owner_id}
    payload.update(fields)

    level = logging.WARNING if kind in WARNING_KINDS else logging.INFO
    _emit(level, _format_human(payload), is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(level, json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["log_event"]
