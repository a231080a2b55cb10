"""Process-wide JSON logger configuration."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
import traceback
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}

_SKIP_FILES = {os.path.normcase(logging.__file__), os.path.normcase(__file__)}


@dataclass
class _LoggerState:
    logger: Optional[logging.Logger] = None
    initialized: bool = False


_state = _LoggerState()
_lock = threading.Lock()


def _level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno).lower())


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": _level_name(record.levelno),
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="milliseconds"),
        }
        if record.name:
            entry["logger"] = record.name
        parent = os.path.basename(os.path.dirname(record.pathname))
        entry["caller"] = f"{parent}/{os.path.basename(record.pathname)}:{record.lineno}"
        entry["msg"] = record.getMessage()
        stack = []
        if record.exc_info:
            stack.append(self.formatException(record.exc_info))
        if record.stack_info:
            stack.append(self.formatStack(record.stack_info))
        if stack:
            entry["stacktrace"] = "\n".join(stack)
        return json.dumps(entry, ensure_ascii=False)


class _StdoutHandler(logging.Handler):
    """Writes to whatever ``sys.stdout`` is at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            sys.stdout.write(self.format(record) + "\n")
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        sys.stdout.flush()


class _StacktraceFilter(logging.Filter):
    def __init__(self, threshold: int) -> None:
        super().__init__()
        self.threshold = threshold

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self.threshold and not record.stack_info and not record.exc_info:
            frames = [
                frame
                for frame in traceback.extract_stack()
                if os.path.normcase(frame.filename) not in _SKIP_FILES
            ]
            record.stack_info = "".join(traceback.format_list(frames)).rstrip()
        return True


class _ForwardHandler(logging.Handler):
    """Routes standard-library log records into the current global logger."""

    def emit(self, record: logging.LogRecord) -> None:
        target = _state.logger
        if target is not None and record.levelno >= target.getEffectiveLevel():
            target.handle(record)


def _redirect_std_logging() -> None:
    root = logging.getLogger()
    if not any(isinstance(h, _ForwardHandler) for h in root.handlers):
        root.addHandler(_ForwardHandler())


def init_logger(level: str = "info", dev: bool = False) -> logging.Logger:
    """Build a JSON logger; the first one built becomes the global logger.

    Unknown level names fall back to info. In dev mode warnings carry a stack trace.
    """
    lv = _LEVELS.get(level.strip().lower(), logging.INFO)
    logger = logging.Logger("", lv)
    logger.propagate = False
    handler = _StdoutHandler()
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
    logger.addFilter(_StacktraceFilter(logging.WARNING if dev else logging.ERROR))

    with _lock:
        if not _state.initialized:
            _state.initialized = True
            _state.logger = logger
            _redirect_std_logging()
    return logger


def get_logger() -> logging.Logger:
    """Return the global logger, creating an info-level one if needed."""
    if _state.logger is None:
        init_logger("info", False)
    return _state.logger


def set_logger(logger: Optional[logging.Logger]) -> None:
    """Replace the global logger; ``None`` leaves it unchanged."""
    if logger is None:
        return
    with _lock:
        _state.logger = logger
        _redirect_std_logging()


def sync() -> None:
    """Flush the global logger's handlers."""
    for handler in get_logger().handlers:
        handler.flush()