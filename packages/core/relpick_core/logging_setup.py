"""JSON-lines file logging for relpick runs, plus an uncaught-exception hook."""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import platform
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


_LOGGER_NAME = "relpick"
_LOG_FILE = "relpick.log"

# LogRecord attributes copied into the JSON payload when passed via ``extra``.
_EXTRA_FIELDS = ("event", "asset", "state", "url", "path", "crash_id")


def _state_root() -> Path:
    system = platform.system()
    if system == "Windows":
        return Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local")) / "relpick"
    if system == "Darwin":
        return Path.home() / "Library" / "Logs" / "relpick"
    return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "relpick"


def log_dir() -> Path:
    directory = _state_root() / "logs"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra`` fields from ``_EXTRA_FIELDS`` are kept."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "where": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in _EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True, default=str)


def _rotating_file(directory: Path, keep_files: int) -> logging.Handler:
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(
        directory / _LOG_FILE,
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    return handler


def _stderr_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter("relpick: %(levelname)s %(message)s"))
    return handler


def configure_logging(
    keep_files: int = 7,
    console: bool = True,
    level: str = "INFO",
    directory: Path | None = None,
) -> logging.Logger:
    """Attach the JSON file handler (and optionally stderr) to the ``relpick`` logger.

    Calling it again is a no-op once handlers exist.
    """
    root = get_logger()
    if root.handlers:
        return root

    level_no = logging.getLevelName(level.upper())
    root.setLevel(level_no if isinstance(level_no, int) else logging.INFO)
    root.addHandler(_rotating_file(directory or log_dir(), keep_files))
    if console:
        root.addHandler(_stderr_handler())

    root.debug("logging configured", extra={"event": "logging_configured"})
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def install_crash_hooks() -> None:
    logger = get_logger("crash")

    def _hook(exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        crash_id = uuid.uuid4().hex
        logger.critical(
            f"unhandled {exc_type.__name__} crash_id={crash_id}",
            exc_info=(exc_type, exc_value, exc_tb),
            extra={"event": "uncaught_exception", "crash_id": crash_id},
        )

    sys.excepthook = _hook
