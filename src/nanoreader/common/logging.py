"""Structured logging utilities.

Diagnostics attach their context (entry index, offsets, sizes, archive path)
through ``extra={"extra_fields": {...}}``; ``LogContext`` adds run-wide
fields as ``context_fields``. The JSON formatter merges both into each line
and the detailed formatter appends them as ``key=value`` pairs, so a console
log is enough to locate a corrupt entry.
"""

import logging
import logging.handlers
import json
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pathlib import Path


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the context of a record; per-call fields override run-wide ones."""
    fields = dict(getattr(record, "context_fields", None) or {})
    fields.update(getattr(record, "extra_fields", None) or {})
    return fields


def _format_value(value: Any) -> str:
    # Offsets read more naturally in hex
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0x100:
        return f"0x{value:X}"
    return str(value)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

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
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # Core keys win on collision
        for key, value in record_fields(record).items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


class DetailedFormatter(logging.Formatter):
    """Human-readable formatter with source location and context fields."""

    def __init__(self) -> None:
        fmt = (
            "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | "
            "%(message)s"
        )
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if not fields:
            return line

        context = " ".join(f"{key}={_format_value(value)}" for key, value in fields.items())
        head, newline, rest = line.partition("\n")
        return f"{head} [{context}]{newline}{rest}"


class SimpleFormatter(logging.Formatter):
    """Simple formatter for console output."""

    def __init__(self) -> None:
        fmt = "%(levelname)-8s | %(name)s | %(message)s"
        super().__init__(fmt=fmt)


FORMATTERS = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "json": StructuredFormatter,
}


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    file_format: str = "json",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> Optional[Path]:
    """Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format type (simple, detailed, json)
        log_file: Optional log file path (the per-run debug log)
        file_format: Log file format type (json or detailed)
        max_file_size_mb: Max log file size in MB
        backup_count: Number of backup files to keep

    Returns:
        The log file path, or None when logging to the console only
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(FORMATTERS.get(format, SimpleFormatter)())
    root_logger.addHandler(console_handler)

    if not log_file:
        return None

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_file_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8",
    )
    # Never the simple format: a debug log needs the context fields
    if file_format == "detailed":
        file_handler.setFormatter(DetailedFormatter())
    else:
        file_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(file_handler)

    return log_file


class LogContext:
    """Context manager for adding structured fields to logs.

    Fields are stored as ``context_fields`` so they never clash with the
    ``extra_fields`` a log call passes. Contexts nest; inner fields are
    added on top of the outer ones.
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self.old_factory = None

    def __enter__(self) -> "LogContext":
        self.old_factory = logging.getLogRecordFactory()

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = self.old_factory(*args, **kwargs)
            if not hasattr(record, "context_fields"):
                record.context_fields = {}
            record.context_fields.update(self.fields)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self.old_factory)
