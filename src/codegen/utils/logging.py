"""Standardized logging for the codegen CLI.

All modules log through the ``codegen`` logger hierarchy; the CLI installs
one handler on the root of that hierarchy in one of three modes:
- Human mode: [LEVEL] message (colored if TTY)
- Verbose mode: [LEVEL][HH:MM:SS] module: message
- CI/JSON mode: {"level":"...","ts":"...","logger":"...","msg":"..."}
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "codegen"

RESET = "\033[0m"

LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31m",
}


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


def _is_tty(stream: TextIO) -> bool:
    return hasattr(stream, "isatty") and stream.isatty()


def _short_name(name: str) -> str:
    """Strip the root prefix: codegen.templates.merger -> templates.merger."""
    if name.startswith(ROOT_LOGGER + "."):
        return name[len(ROOT_LOGGER) + 1 :]
    return name


class HumanFormatter(logging.Formatter):
    """Formatter for terminal output.

    Verbose mode adds a timestamp and the emitting module, so debug lines
    from the merger and renderer can be told apart.
    """

    def __init__(self, use_colors: bool = False, verbose: bool = False) -> None:
        super().__init__()
        self.use_colors = use_colors
        self.verbose = verbose

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        prefix = f"[{record.levelname}]"
        if self.use_colors:
            prefix = f"{LEVEL_COLORS.get(record.levelno, RESET)}{prefix}{RESET}"

        message = record.getMessage()
        if self.verbose:
            prefix += datetime.fromtimestamp(record.created).strftime("[%H:%M:%S]")
            if record.name != ROOT_LOGGER:
                message = f"{_short_name(record.name)}: {message}"

        line = f"{prefix} {message}"
        if record.exc_info and self.verbose:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JSONFormatter(logging.Formatter):
    """Formatter for JSON lines output (machine-readable).

    Fields passed to CodegenLogger.structured() are merged into the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "logger": _short_name(record.name),
            "msg": record.getMessage(),
        }

        extra = getattr(record, "extra_data", None)
        if extra:
            entry.update(extra)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class CodegenLogger(logging.Logger):
    """Logger with structured logging support."""

    def structured(self, level: int, msg: str, **fields: Any) -> None:
        """Log a message carrying extra fields.

        The fields only show up in JSON mode; human output prints msg alone.

        Args:
            level: Log level
            msg: Log message
            **fields: Additional data for JSON output (path, phase, outputs, ...)
        """
        if self.isEnabledFor(level):
            self._log(level, msg, (), extra={"extra_data": fields})


logging.setLoggerClass(CodegenLogger)


def get_logger(name: str = ROOT_LOGGER) -> CodegenLogger:
    """Get a codegen logger instance."""
    return logging.getLogger(name)  # type: ignore[return-value]


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Install a single handler on the codegen logger.

    Re-running replaces the previous handler, so repeated CLI invocations in
    one process do not duplicate lines.

    Args:
        mode: Output mode (human, verbose, json)
        level: Minimum log level
        stream: Output stream (default: stdout)
    """
    stream = stream or sys.stdout

    if mode == LogMode.JSON:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = HumanFormatter(
            use_colors=_is_tty(stream),
            verbose=mode == LogMode.VERBOSE,
        )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)


def configure_from_cli(
    verbose: bool = False,
    quiet: bool = False,
    ci: bool = False,
) -> None:
    """Configure logging based on CLI flags.

    --ci picks JSON output; --verbose adds timestamps and debug messages;
    --quiet drops info messages. --quiet wins over --verbose for the level.
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

    setup_logging(mode=mode, level=level, stream=sys.stdout)
