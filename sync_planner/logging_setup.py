"""
Logging Setup
=============

Configures stdlib logging for planner runs:
- Plain text lines (default) or JSON lines
- Optional file handler
- Python warnings (e.g. CompositeKeyWarning) routed into the log
"""

import json
import logging
import os
import traceback
from datetime import datetime, timezone

from .settings import LoggingSettings

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Attributes every LogRecord has; anything else was passed via `extra`
_RECORD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'taskName'
}


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info)
            }

        for key in set(record.__dict__.keys()) - _RECORD_ATTRS:
            log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


def _formatter(log_settings: LoggingSettings) -> logging.Formatter:
    if log_settings.format == "json":
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(log_settings: LoggingSettings = None):
    """Setup logging configuration."""
    log_settings = log_settings or LoggingSettings()
    log_level = getattr(logging, log_settings.level, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(_formatter(log_settings))
    logging.basicConfig(level=log_level, handlers=[handler])

    if log_settings.log_to_file:
        log_dir = os.path.dirname(log_settings.log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_settings.log_path)
        file_handler.setFormatter(_formatter(log_settings))
        logging.getLogger().addHandler(file_handler)

    logging.captureWarnings(True)
