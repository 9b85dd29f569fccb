"""Logging configuration and structured log formatting."""

import json
import logging
import sys
from typing import Any, Dict

APP_LOGGER = "mdrcp"


class ColorCodes:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": ColorCodes.BLUE,
    "INFO": ColorCodes.GREEN,
    "WARNING": ColorCodes.YELLOW,
    "ERROR": ColorCodes.RED + ColorCodes.BOLD,
    "CRITICAL": ColorCodes.MAGENTA + ColorCodes.BOLD,
}


class JsonFormatter(logging.Formatter):
    """Format log records as color-coded JSON."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, "")

        # Event loggers pass dicts as the message
        msg = record.msg if isinstance(record.msg, dict) else record.getMessage()

        output = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": msg,
        }

        if hasattr(record, "data"):
            output["data"] = record.data

        json_str = json.dumps(output, default=str)
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(verbose: bool = False) -> None:
    """Set up application logging on stderr.

    stdout is reserved for deployment output and JSON summaries, so the
    handler always writes to stderr. Without ``verbose`` only critical records pass;
    failures reach the user through the CLI's own error output.
    """
    app_logger = logging.getLogger(APP_LOGGER)
    level = logging.DEBUG if verbose else logging.CRITICAL

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        app_logger.addHandler(handler)
        app_logger.propagate = False

    app_logger.setLevel(level)
    for handler in app_logger.handlers:
        handler.setLevel(level)
        # Follow sys.stderr if it was replaced since the first call
        if isinstance(handler, logging.StreamHandler):
            handler.setStream(sys.stderr)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance below the application logger."""
    if name == APP_LOGGER or name.startswith(f"{APP_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER}.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Dict[str, Any] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
