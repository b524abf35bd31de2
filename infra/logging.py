"""
murmur Centralized Logging
--------------------------
Structured logging with session_id propagation.

Design:
- Every recording session (start → stop) gets a unique session_id
- session_id is stamped on every record logged while the session is active
- Console output goes through rich, file output is JSON lines
- Clear severity discipline: INFO=state, WARNING=recoverable, ERROR=abort

Usage:
    from infra.logging import configure_logging, get_logger, SessionContext

    configure_logging(level=logging.INFO, log_dir="logs")
    logger = get_logger("session")

    with SessionContext() as session_id:
        logger.info("Transcribing")
"""

import contextvars
import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from core.context import (
    generate_session_id, get_session_id, reset_session_id, set_session_id,
)

LOG_FILE_NAME = "murmur.log"
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 3


class SessionContext:
    """
    Context manager for session scoping.

    Usage:
        with SessionContext() as session_id:
            # All logs within this block carry session_id
            logger.info("Processing...")
    """

    def __init__(self, session_id: Optional[str] = None):
        self._session_id = session_id or generate_session_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_session_id(self._session_id)
        return self._session_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            reset_session_id(self._token)


class SessionIdFilter(logging.Filter):
    """Logging filter that adds session_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "session_id", None) is None:
            record.session_id = get_session_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("session_id", "details")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = True,
    rich_console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Configure the murmur logging system. Later calls are ignored.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable console output
        file: Enable file output
        rich_console: Console to render to, stderr by default

    Returns:
        Path of the log file, if file output is enabled
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return _log_file_path

    root_logger = logging.getLogger("murmur")
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.propagate = False

    session_filter = SessionIdFilter()

    if console:
        console_handler = RichHandler(
            console=rich_console or Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(level)
        console_handler.addFilter(session_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)
        _log_file_path = log_path / LOG_FILE_NAME

        file_handler = logging.handlers.RotatingFileHandler(
            _log_file_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(session_filter)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    _logging_initialized = True
    return _log_file_path


def reset_logging() -> None:
    """Drop all murmur handlers so configure_logging() can run again."""
    global _logging_initialized, _log_file_path

    root_logger = logging.getLogger("murmur")
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.propagate = True
    _logging_initialized = False
    _log_file_path = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the murmur namespace.

    Args:
        name: Logger name (prefixed with 'murmur.' if not already)
    """
    if not name.startswith("murmur"):
        name = f"murmur.{name}"

    return logging.getLogger(name)
