from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled console logging for the mapper.

Every line starts with one of INFO|WARN|ERROR|SUMMARY (DEBUG with --debug).
Module loggers live under "collection_mapper." and propagate to the one
handler installed here, so a classifier event comes out as
"WARN AMBIGUOUS_CLASSIFICATION ...".
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "set_level",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "collection_mapper"

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """"<LABEL> <message>", with the traceback on the following lines when there is one."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        line = f"{label} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Install the labeled stdout handler on the application logger.

    Calling it again returns the logger already configured; use set_level()
    to change the threshold afterwards.
    """
    global _configured
    if _configured is not None:
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    app = logging.getLogger(APP_LOGGER_NAME)
    for old in list(app.handlers):
        app.removeHandler(old)

    console = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console.setFormatter(LabeledFormatter())
    app.addHandler(console)
    app.propagate = False

    _configured = app
    set_level(level)
    return app


def set_level(level: int) -> None:
    """Set the threshold of the application logger and its handlers."""
    app = get_logger()
    app.setLevel(level)
    for handler in app.handlers:
        handler.setLevel(level)


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the handler and forget the configuration (tests)."""
    global _configured
    if _configured is not None:
        for handler in list(_configured.handlers):
            _configured.removeHandler(handler)
    _configured = None
