"""
logging.py

Centralized logging utilities for xdgstart.

Provides:
- JsonLineFormatter: compact JSONL formatter for structured logs
- init_logger: initialise the "xdgstart" logger with console + RotatingFileHandler
- get_logger: convenience to fetch child loggers
- read_jsonl_tail: helper to read the last N JSON objects from a JSONL log file
- LogContext: Context manager for injecting context into logs (e.g. scope="user")

Design notes:
- Logs are written in UTF-8 JSON lines. Each record contains: ts (ISO UTC), level, logger,
  msg, and optional meta fields.
- Includes a separate 'xdgstart.error.jsonl' for ERROR+ logs.
- The launcher runs at session start, possibly before the state dir exists or while it is
  read-only. File logging is best effort; the console handler always works.
"""
from __future__ import annotations
import json
import logging
import logging.handlers
import os
import sys
import contextvars
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any

LOGGER_NAME = "xdgstart"
DEFAULT_LOG_FILENAME = "xdgstart.jsonl"
ERROR_LOG_FILENAME = "xdgstart.error.jsonl"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"

_log_context = contextvars.ContextVar("log_context", default={})


class LogContext:
    """
    Context manager to inject key-value pairs into all logs within the block.

    Usage:
        with LogContext(scope="system", directory="/etc/xdg/autostart"):
            logger.info("Parsing")  # JSON record carries scope and directory
    """
    def __init__(self, **kwargs):
        self.new_ctx = kwargs
        self.token = None

    def __enter__(self):
        ctx = _log_context.get().copy()
        ctx.update(self.new_ctx)
        self.token = _log_context.set(ctx)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token:
            _log_context.reset(self.token)


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()

        entry: Dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
        }

        ctx = _log_context.get()
        if ctx:
            entry.update(ctx)

        if record.levelno == logging.DEBUG:
            entry["func"] = record.funcName
            entry["line"] = record.lineno

        if hasattr(record, "meta") and record.meta:
            entry["meta"] = record.meta

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def _make_rotating_handler(
    log_file: Path,
    level: int,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8"
    )
    handler.setFormatter(JsonLineFormatter())
    handler.setLevel(level)
    return handler


def init_logger(
    logs_dir: Optional[Path],
    console: bool = True,
    verbose: bool = False,
    file_logging: bool = True,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """Initialize the xdgstart logger. Idempotent."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # 1. Console handler (human readable)
    if console:
        console_h = logging.StreamHandler()
        console_h.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_h.setLevel(logging.DEBUG if verbose else logging.INFO)
        logger.addHandler(console_h)

    # 2. JSONL file handlers (all logs DEBUG+, errors only)
    if file_logging and logs_dir is not None:
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            logger.addHandler(_make_rotating_handler(
                logs_dir / DEFAULT_LOG_FILENAME, logging.DEBUG, max_bytes, backup_count))
            logger.addHandler(_make_rotating_handler(
                logs_dir / ERROR_LOG_FILENAME, logging.ERROR, max_bytes, backup_count))
        except OSError as e:
            logger.warning("File logging disabled", extra={"meta": {"logs_dir": str(logs_dir), "error": str(e)}})

    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Get the 'xdgstart' logger or a child (e.g., 'xdgstart.executor')."""
    name = f"{LOGGER_NAME}.{child}" if child else LOGGER_NAME
    return logging.getLogger(name)


def read_jsonl_tail(log_file: Path, max_lines: int = 200) -> List[Dict[str, Any]]:
    """Return the last `max_lines` records of a JSONL log, skipping malformed lines."""
    if max_lines <= 0 or not log_file.exists():
        return []

    # Rotation caps the file at max_bytes, so one forward pass is enough.
    with log_file.open("r", encoding="utf-8", errors="replace") as f:
        tail = deque((ln for ln in f if ln.strip()), maxlen=max_lines)

    records: List[Dict[str, Any]] = []
    for ln in tail:
        try:
            records.append(json.loads(ln))
        except json.JSONDecodeError:
            continue
    return records


def global_exception_hook(exctype, value, tb):
    """sys.excepthook for the console entry: log the crash, exit 1."""
    if issubclass(exctype, KeyboardInterrupt):
        sys.__excepthook__(exctype, value, tb)
        return
    get_logger("crash").critical("Uncaught exception", exc_info=(exctype, value, tb))
    sys.exit(1)
