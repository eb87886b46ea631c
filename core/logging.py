"""
logging.py

Centralized logging utilities for DeskLink.

Provides:
- JsonLineFormatter: compact JSONL formatter for structured logs
- init_logger: initialise the "desklink" logger with RotatingFileHandlers
- get_logger: convenience to fetch child loggers
- read_jsonl_tail: read the last N JSON objects from a JSONL log file
- LogContext: context manager injecting fields (e.g. op="enable") into logs
- global_exception_hook: last-resort logging of uncaught exceptions

Design notes:
- Records are UTF-8 JSON lines: ts (ISO UTC), level, logger, msg, pid,
  thread, plus any LogContext fields and an optional "meta" dict passed via
  extra={"meta": {...}}.
- ERROR+ records are duplicated into 'desklink.error.jsonl'.
"""
from __future__ import annotations
import contextvars
import json
import logging
import logging.handlers
import os
import sys
import traceback
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Union

LOGGER_NAME = "desklink"
DEFAULT_LOG_FILENAME = "desklink.jsonl"
ERROR_LOG_FILENAME = "desklink.error.jsonl"
DEFAULT_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


class LogContext:
    """
    Inject key-value pairs into every record emitted inside the block.

    Usage:
        with LogContext(op="disable"):
            logger.warning("platform call failed")  # record carries op=disable
    """
    def __init__(self, **kwargs):
        self.new_ctx = kwargs
        self.token = None

    def __enter__(self):
        ctx = dict(_log_context.get())
        ctx.update(self.new_ctx)
        self.token = _log_context.set(ctx)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            _log_context.reset(self.token)
            self.token = None


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "thread": record.threadName,
        }
        entry.update(_log_context.get())

        if record.levelno == logging.DEBUG:
            entry["func"] = record.funcName
            entry["line"] = record.lineno

        meta = getattr(record, "meta", None)
        if meta:
            entry["meta"] = meta

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def _make_rotating_handler(log_file: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file),
        maxBytes=DEFAULT_MAX_BYTES,
        backupCount=DEFAULT_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(JsonLineFormatter())
    handler.setLevel(level)
    return handler


def init_logger(
    logs_dir: Path,
    console: bool = True,
    level: Union[int, str] = logging.DEBUG,
) -> logging.Logger:
    """Initialize the 'desklink' logger. Idempotent."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger.setLevel(level)
    logger.propagate = False

    logger.addHandler(_make_rotating_handler(logs_dir / DEFAULT_LOG_FILENAME, level))
    logger.addHandler(_make_rotating_handler(logs_dir / ERROR_LOG_FILENAME, logging.ERROR))

    if console:
        console_h = logging.StreamHandler()
        console_h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        console_h.setLevel(max(logging.INFO, level))
        logger.addHandler(console_h)

    return logger


def shutdown_logger() -> None:
    """Close and detach all handlers installed by init_logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Get the 'desklink' logger or a child (e.g., 'desklink.autolaunch')."""
    name = f"{LOGGER_NAME}.{child}" if child else LOGGER_NAME
    return logging.getLogger(name)


def read_jsonl_tail(log_file: Path, max_lines: int = 200) -> List[Dict[str, Any]]:
    """Return up to `max_lines` JSON objects from the end of a JSONL file.

    Malformed lines are skipped.
    """
    log_file = Path(log_file)
    if max_lines <= 0 or not log_file.exists():
        return []

    tail: Deque[str] = deque(maxlen=max_lines)
    with log_file.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if line:
                tail.append(line)

    results: List[Dict[str, Any]] = []
    for line in tail:
        try:
            results.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return results


def global_exception_hook(exctype, value, tb):
    """
    Catch any unhandled exception (bug) and log it before exiting.
    """
    if issubclass(exctype, KeyboardInterrupt):
        sys.__excepthook__(exctype, value, tb)
        return

    logger = get_logger("crash_handler")
    logger.critical("Uncaught Exception", exc_info=(exctype, value, tb))

    # stderr as a backup in case no file handler is installed yet
    sys.stderr.write("!!! CRITICAL CRASH LOGGED !!!\n")
    traceback.print_exception(exctype, value, tb)

    sys.exit(1)
