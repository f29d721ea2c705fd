"""Logging setup for keeper runs.

The console shows what a person running ``keeper check`` wants to read: the
progress lines and the error summary. The optional log file keeps one JSON
object per record so a run can be inspected afterwards.

Structured fields (the running command, the manifest, an error category) are
attached to records by :class:`LogContext` and rendered by every formatter.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# LogRecord attribute holding the structured fields
FIELDS_ATTR = "extra_fields"

CONSOLE_FORMATS = ("plain", "simple", "json")

_OWNED_ATTR = "_keeper_handler"


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured fields attached to ``record`` (empty if none)."""
    return getattr(record, FIELDS_ATTR, None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Console lines, optionally prefixed with the level.

    Structured fields are appended as ``[key=value ...]`` when
    ``show_fields`` is set.
    """

    def __init__(self, show_level: bool = True, show_fields: bool = True) -> None:
        fmt = "%(levelname)-8s | %(message)s" if show_level else "%(message)s"
        super().__init__(fmt=fmt)
        self.show_fields = show_fields

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        fields = record_fields(record)
        if self.show_fields and fields:
            rendered = " ".join(f"{key}={value}" for key, value in fields.items())
            text = f"{text} [{rendered}]"
        return text


def build_formatter(format: str) -> logging.Formatter:
    """Return the console formatter for ``format``.

    ``plain`` prints bare messages, ``simple`` adds the level and the
    structured fields, ``json`` prints one JSON object per line.

    Raises:
        ValueError: If ``format`` is not one of CONSOLE_FORMATS
    """
    if format == "plain":
        return ConsoleFormatter(show_level=False, show_fields=False)
    if format == "simple":
        return ConsoleFormatter()
    if format == "json":
        return StructuredFormatter()
    raise ValueError(f"Unknown log format {format!r}, expected one of {', '.join(CONSOLE_FORMATS)}")


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure the root logger for a keeper run.

    Replaces any existing root handlers with a stderr console handler and,
    when ``log_file`` is given, a rotating JSON log file.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (plain, simple, json)
        log_file: Optional log file path; parent directories are created
        max_file_size_mb: Rotate the log file at this size
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Handlers installed by an earlier call are closed; others are only detached
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if getattr(handler, _OWNED_ATTR, False):
            handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(build_formatter(format))
    setattr(console_handler, _OWNED_ATTR, True)
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
        setattr(file_handler, _OWNED_ATTR, True)
        root_logger.addHandler(file_handler)


class LogContext:
    """Attach structured fields to every record created inside the block.

    Contexts nest: inner fields are merged over the outer ones.

    Example:
        with LogContext(command="check", manifest="photos.sfv"):
            logger.info("Running 'check'")
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._previous_factory = None

    def __enter__(self) -> "LogContext":
        previous = logging.getLogRecordFactory()
        self._previous_factory = previous
        fields = self.fields

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = previous(*args, **kwargs)
            setattr(record, FIELDS_ATTR, {**record_fields(record), **fields})
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self._previous_factory)
