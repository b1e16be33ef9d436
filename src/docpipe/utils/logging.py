"""Standardized logging for docpipe.

Provides three output modes:
- Human mode: [LEVEL] message (colored if TTY)
- Verbose mode: [LEVEL][HH:MM:SS] message
- CI/JSON mode: {"level":"...","ts":"...","logger":"...","msg":"..."}

Records emitted while a task is running carry a ``task`` attribute
(see ``task_extra``); human and verbose output prefix it as ``<Task>``.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "docpipe"


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.GRAY,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.RED,
}


def _is_tty(stream: TextIO | None = None) -> bool:
    """Check if the stream is a TTY (supports colors)."""
    if stream is None:
        stream = sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def task_extra(task_name: str) -> dict[str, str]:
    """Build the ``extra`` mapping that tags a log record with a task name."""
    return {"task": task_name}


class _TextFormatter(logging.Formatter):
    """Shared behaviour for the two plain-text formatters."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def _level(self, record: logging.LogRecord) -> str:
        if self.use_colors:
            color = LEVEL_COLORS.get(record.levelno, Colors.RESET)
            return f"{color}[{record.levelname}]{Colors.RESET}"
        return f"[{record.levelname}]"

    def _message(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        task = getattr(record, "task", None)
        if task:
            label = f"{Colors.CYAN}<{task}>{Colors.RESET}" if self.use_colors else f"<{task}>"
            message = f"{label} {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class HumanFormatter(_TextFormatter):
    """Formatter for human-readable output.

    Format: [LEVEL] message
    """

    def format(self, record: logging.LogRecord) -> str:
        return f"{self._level(record)} {self._message(record)}"


class VerboseFormatter(_TextFormatter):
    """Formatter for verbose output with timestamps.

    Format: [LEVEL][HH:MM:SS] message
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        return f"{self._level(record)}[{timestamp}] {self._message(record)}"


class JSONFormatter(logging.Formatter):
    """Formatter for JSON lines output (machine-readable).

    Format: {"level":"INFO","ts":"2026-01-31T19:45:23Z","logger":"docpipe.tasks","msg":"..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        task = getattr(record, "task", None)
        if task:
            log_entry["task"] = task

        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)

        return json.dumps(log_entry)


class DocpipeLogger(logging.Logger):
    """Custom logger with structured logging support."""

    def structured(
        self,
        level: int,
        msg: str,
        **kwargs: Any,
    ) -> None:
        """Log a message with additional structured data.

        Args:
            level: Log level
            msg: Log message
            **kwargs: Additional data to include in JSON output
        """
        if not self.isEnabledFor(level):
            return
        record = self.makeRecord(self.name, level, "(unknown)", 0, msg, (), None)
        if kwargs:
            record.extra_data = kwargs  # type: ignore[attr-defined]
        self.handle(record)


logging.setLoggerClass(DocpipeLogger)


def get_logger(name: str = ROOT_LOGGER) -> DocpipeLogger:
    """Get a docpipe logger instance.

    Args:
        name: Logger name

    Returns:
        Configured DocpipeLogger instance
    """
    return logging.getLogger(name)  # type: ignore[return-value]


class _MaxLevelFilter(logging.Filter):
    """Pass only records strictly below a level."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Configure logging with the specified mode.

    Args:
        mode: Output mode (human, verbose, json)
        level: Minimum log level
        stream: Single output stream. When omitted, info and below go to
            stdout and warnings and above go to stderr.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    def make_formatter(target: TextIO) -> logging.Formatter:
        if mode == LogMode.JSON:
            return JSONFormatter()
        if mode == LogMode.VERBOSE:
            return VerboseFormatter(use_colors=_is_tty(target))
        return HumanFormatter(use_colors=_is_tty(target))

    if stream is not None:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(make_formatter(stream))
        logger.addHandler(handler)
        return

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.setFormatter(make_formatter(sys.stdout))
    out_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    logger.addHandler(out_handler)

    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setFormatter(make_formatter(sys.stderr))
    err_handler.setLevel(logging.WARNING)
    logger.addHandler(err_handler)


def configure_from_cli(
    verbose: bool = False,
    quiet: bool = False,
    ci: bool = False,
) -> None:
    """Configure logging based on CLI flags.

    Args:
        verbose: Enable verbose mode with timestamps
        quiet: Suppress info messages (warnings and errors only)
        ci: Enable JSON output for CI/CD
    """
    if ci:
        mode = LogMode.JSON
    elif verbose:
        mode = LogMode.VERBOSE
    else:
        mode = LogMode.HUMAN

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logging(mode=mode, level=level)
