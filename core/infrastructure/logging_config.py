"""
Logging setup for File2Knowledge Desk.

Records go to a rotating file under the data directory and to stderr; stdout
is left to the answers printed by the command line entry point. Qt's own
messages are routed into the ``qt`` logger, request logs from httpx are kept
quiet unless asked for, and API keys never reach a handler.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from core.constants import DEFAULT_DATA_DIRNAME

LOG_FILENAME = "file2knowledge.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] [%(name)s] %(message)s"

ENV_FILE_LEVEL = "FILE2KNOWLEDGE_LOG_FILE_LEVEL"
ENV_CONSOLE_LEVEL = "FILE2KNOWLEDGE_LOG_CONSOLE_LEVEL"
ENV_HTTP_LEVEL = "FILE2KNOWLEDGE_LOG_HTTP_LEVEL"

# httpx logs every request at INFO.
_HTTP_LOGGERS = ("httpx", "httpcore")

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

_SECRET_PATTERN = re.compile(r"\b(sk-[A-Za-z0-9_-]{4})[A-Za-z0-9_-]+")

_excepthook_installed = False


def parse_level(value: Optional[str], default: int) -> int:
    """Accept level names ('debug', 'WARNING') or numbers ('10')."""
    if not value:
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


class SecretRedactingFilter(logging.Filter):
    """Masks OpenAI keys in messages and arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _qt_message_handler(mode, context, message) -> None:
    category = getattr(context, "category", None) or "default"
    logging.getLogger(f"qt.{category}").log(_QT_LEVELS.get(mode, logging.WARNING), message)


def _install_excepthook() -> None:
    global _excepthook_installed
    if _excepthook_installed:
        return

    def handle_exception(exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logging.getLogger("uncaught").critical("Unhandled exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = handle_exception
    _excepthook_installed = True


def configure_logging(
    log_dir: Optional[Path] = None,
    file_level: Optional[str] = None,
    console_level: Optional[str] = None,
) -> Path:
    """Configure root logging.

    Levels come from the arguments, then the FILE2KNOWLEDGE_LOG_* environment
    variables, then INFO for the file and WARNING for the console.

    Returns:
        Path of the log file (which may not exist if the directory is not writable)
    """
    log_dir = Path(log_dir) if log_dir else Path.home() / DEFAULT_DATA_DIRNAME / "logs"
    log_file = log_dir / LOG_FILENAME

    file_level_value = parse_level(file_level or os.getenv(ENV_FILE_LEVEL), logging.INFO)
    console_level_value = parse_level(console_level or os.getenv(ENV_CONSOLE_LEVEL), logging.WARNING)

    formatter = logging.Formatter(LOG_FORMAT)
    redactor = SecretRedactingFilter()

    handlers: list[logging.Handler] = []
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level_value)
        handlers.append(file_handler)
    except OSError as exc:
        print(f"File logging disabled: {exc}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level_value)
    handlers.append(console_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redactor)

    logging.basicConfig(
        level=min(file_level_value, console_level_value),
        handlers=handlers,
        force=True,
    )
    http_level = parse_level(os.getenv(ENV_HTTP_LEVEL), logging.WARNING)
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    logging.captureWarnings(True)
    qInstallMessageHandler(_qt_message_handler)
    _install_excepthook()

    logging.getLogger(__name__).debug("Logging initialized at %s", log_file)
    return log_file
