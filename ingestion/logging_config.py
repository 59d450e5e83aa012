"""Logging configuration for stream-ingestion.

This module provides flexible logging configuration with support for:
- Environment variable-based log level control
- JSON formatting for production monitoring
- Rotating JSON log files
- Structured logging with context
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def __init__(self, include_context: bool = True):
        """
        Initialize JSON formatter.

        Args:
            include_context: Whether to include module/function/line fields
        """
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            log_data["module"] = record.module
            log_data["function"] = record.funcName
            log_data["line"] = record.lineno

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Format log records in human-readable format with colors (optional)."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_context: bool = False):
        if include_context:
            fmt = "[%(levelname)s] %(asctime)s - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"
        else:
            fmt = "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"

        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            return f"{color}{formatted}{self.COLORS['RESET']}"
        return formatted


_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def parse_log_level(level_name: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as ``"debug"`` to its logging constant."""
    if not level_name:
        return default
    return _LEVEL_MAP.get(level_name.upper(), default)


def get_log_level_from_env() -> int:
    """
    Get log level from environment variable.

    Environment variables checked (in order):
    1. INGEST_LOG_LEVEL - stream-ingestion specific
    2. LOG_LEVEL - Generic

    Returns:
        Logging level (default: INFO)
    """
    return parse_log_level(
        os.environ.get("INGEST_LOG_LEVEL") or os.environ.get("LOG_LEVEL", "INFO")
    )


def get_log_format_from_env() -> str:
    """Return INGEST_LOG_FORMAT ('json', 'human', 'simple'), default 'human'."""
    return os.environ.get("INGEST_LOG_FORMAT", "human").lower()


def setup_logging(
    level: Optional[int] = None,
    format_type: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_colors: bool = False,
    include_context: bool = False,
) -> None:
    """
    Configure root logging for stream-ingestion.

    Args:
        level: Logging level (defaults to INGEST_LOG_LEVEL or INFO)
        format_type: Format type ('json', 'human', 'simple')
        log_file: Optional path to a rotating JSON log file
        use_colors: Use ANSI colors in console output
        include_context: Include module/function context in logs

    Environment Variables:
        INGEST_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        INGEST_LOG_FORMAT: Set format (json, human, simple)
        INGEST_LOG_FILE: Path to log file
        LOG_LEVEL: Fallback for log level

    Examples:
        >>> setup_logging()
        >>> setup_logging(level=logging.DEBUG, format_type='json')
    """
    if level is None:
        level = get_log_level_from_env()

    if format_type is None:
        format_type = get_log_format_from_env()

    if log_file is None:
        log_file_env = os.environ.get("INGEST_LOG_FILE")
        if log_file_env:
            log_file = Path(log_file_env)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)

    formatter: logging.Formatter
    if format_type == "json":
        formatter = JSONFormatter(include_context=include_context)
    elif format_type == "simple":
        formatter = logging.Formatter("%(levelname)s: %(message)s")
    else:
        formatter = HumanReadableFormatter(
            use_colors=use_colors, include_context=include_context
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        # 10MB per file, 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setLevel(level)
        # File logs are always JSON
        file_handler.setFormatter(JSONFormatter(include_context=True))
        root_logger.addHandler(file_handler)


def get_logger(
    name: str, extra: Optional[Dict[str, Any]] = None
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a logger with optional extra context.

    Example:
        >>> logger = get_logger(__name__, extra={'sink_type': 's3'})
        >>> logger.info("Uploading part")
    """
    logger = logging.getLogger(name)
    if extra:
        return logging.LoggerAdapter(logger, extra)
    return logger


def log_exception(
    logger: Union[logging.Logger, logging.LoggerAdapter],
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log an exception with its traceback and type/message fields."""
    logger.error(
        f"{message}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            **context,
        },
    )


def log_performance(
    logger: Union[logging.Logger, logging.LoggerAdapter],
    operation: str,
    duration_seconds: float,
    **metrics: Any,
) -> None:
    """
    Log performance metrics.

    Example:
        >>> log_performance(logger, "ingestion", duration_seconds=4.2, total_bytes=1024)
    """
    logger.info(
        f"Performance: {operation} completed in {duration_seconds:.2f}s",
        extra={"operation": operation, "duration_seconds": duration_seconds, **metrics},
    )
