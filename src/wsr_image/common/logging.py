"""Logging setup for wsr-image commands.

The console handler writes to stderr so stdout stays free for reports.
Fields attached with ``LogContext`` appear in every format: as top-level
keys in JSON, and as a trailing ``[key=value ...]`` block otherwise.
"""

import logging
import logging.handlers
import json
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pathlib import Path


def _context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class StructuredFormatter(logging.Formatter):
    """JSON lines formatter, also used for log files."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        log_data.update(_context_fields(record))
        return json.dumps(log_data, default=str)


class ContextFormatter(logging.Formatter):
    """Text formatter that appends ``LogContext`` fields to the message line."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = _context_fields(record)
        if not fields:
            return text

        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        first_line, newline, rest = text.partition("\n")
        return f"{first_line} [{suffix}]{newline}{rest}"


class DetailedFormatter(ContextFormatter):
    """Timestamped formatter with source location."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(ContextFormatter):
    """Compact console formatter."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


CONSOLE_FORMATTERS = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "json": StructuredFormatter,
}


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure the root logger, replacing any existing handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (simple, detailed, json)
        log_file: Optional log file path, written as JSON lines
        max_file_size_mb: Rotate the log file at this size
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(CONSOLE_FORMATTERS.get(format, SimpleFormatter)())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


class LogContext:
    """Attach fields to every log record created inside the ``with`` block.

    Example::

        with LogContext(logger, input_file=str(path)):
            logger.info("Scanning")  # ... | Scanning [input_file=steps.mht]
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self.old_factory = None

    def __enter__(self) -> "LogContext":
        self.old_factory = logging.getLogRecordFactory()
        old_factory = self.old_factory
        fields = self.fields

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = old_factory(*args, **kwargs)
            # Nested contexts merge; the innermost value wins
            record.extra_fields = {**_context_fields(record), **fields}
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self.old_factory)
