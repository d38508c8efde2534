"""
flagguard Logging — stdlib logger setup plus structured JSONL host logs.

Implements:
- JsonFormatter / configure_logging: handler for the "flagguard" logger tree
- LogEntry / FileLogger: per-object-type, per-category JSONL files (daily)
- log_host_rejection: entry builder for saves refused by a host
- init_logging / log: optional global file sink

Validators log their single failure diagnostic through plain
``logging.getLogger(...)`` loggers and never write structured entries.
Host rejections (the flush hook) are written as JSONL once init_logging()
has been called.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("flagguard.engine.logging")

OBJECT_TYPE_CATEGORIES = {
    "hosts": ["execution"],
}

# Attributes every LogRecord has; anything else came in through `extra`.
_RESERVED_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a LogRecord (including `extra` fields) as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str, separators=(",", ":"))


def configure_logging(config=None, stream=None) -> logging.Logger:
    """
    Attach a handler to the "flagguard" logger according to LoggingConfig.
    Safe to call repeatedly; replaces the handler installed previously.
    """
    from flagguard.engine.config import LoggingConfig

    config = config or LoggingConfig()
    root = logging.getLogger("flagguard")

    for handler in list(root.handlers):
        if getattr(handler, "_flagguard_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    if config.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler._flagguard_handler = True

    root.addHandler(handler)
    root.setLevel(config.level)
    return root


# ---------------------------------------------------------------------------
# Structured file logs
# ---------------------------------------------------------------------------

class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.
    Files rotate daily: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        file_path = self._resolve_path(entry.object_type, entry.category)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with self._file_locks[str(file_path)]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        today = date.today().isoformat()
        return self._log_dir / object_type / category / f"{today}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, **extra: Any) -> Dict[str, Any]:
    from flagguard.engine.context import get_execution_context

    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    ctx = get_execution_context()
    if ctx is not None:
        entry["execution_id"] = ctx.execution_id
        if ctx.user_id is not None:
            entry["user_id"] = ctx.user_id
    entry.update(extra)
    return entry


def log_host_rejection(host: str, record_types: List[str], issue_count: int) -> LogEntry:
    """Build an entry for a host refusing to persist invalid records."""
    data = _base_entry(
        event="save_rejected",
        level="WARNING",
        host=host,
        record_types=sorted(set(record_types)),
        issue_count=issue_count,
    )
    return LogEntry("hosts", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global File Logger
# ---------------------------------------------------------------------------

_file_logger: Optional[FileLogger] = None


def init_logging(log_dir: str) -> FileLogger:
    """Initialize the global structured file sink."""
    global _file_logger
    _file_logger = FileLogger(log_dir=log_dir)
    return _file_logger


def get_file_logger() -> Optional[FileLogger]:
    return _file_logger


def log(entry: LogEntry) -> bool:
    """Write an entry to the global sink. Returns False when none is configured."""
    if _file_logger is None:
        return False
    try:
        _file_logger.write(entry)
    except OSError as e:
        logger.error(f"Structured log write failed: {e}")
        return False
    return True


def shutdown_logging() -> None:
    """Drop the global file sink."""
    global _file_logger
    _file_logger = None
