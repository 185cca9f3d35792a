"""
Logging setup for the autocommitter server.

Environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default INFO)
- LOG_FORMAT: simple, detailed, json (default simple)
- LOG_FILE: optional path; records are written there as well as to stdout
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

FORMATS: Dict[str, Dict[str, str]] = {
    "simple": {
        "fmt": "%(asctime)s %(levelname)-7s %(message)s",
        "datefmt": "%H:%M:%S",
    },
    "detailed": {
        "fmt": "%(asctime)s %(levelname)-7s [%(name)s:%(lineno)d] %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
}

# Libraries that log every request or git invocation at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "git", "asyncio", "anthropic", "google_genai")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Records may carry an ``extra_data`` attribute (passed through
    ``logger.info(..., extra={"extra_data": {...}})``), which is emitted under
    the ``extra`` key as structured data. Failover summaries use it for their
    attempt list.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra_data", None)
        if extra is not None:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def build_formatter(style: str) -> logging.Formatter:
    """Formatter for a LOG_FORMAT value; unknown styles fall back to simple"""
    if style == "json":
        return JSONFormatter()
    return logging.Formatter(**FORMATS.get(style, FORMATS["simple"]))


def configure_logging(
    level: Optional[str] = None,
    format_style: Optional[str] = None,
    log_file: Optional[str] = None
) -> None:
    """
    Configure the root logger.

    Safe to call more than once: handlers installed by a previous call are
    replaced, not duplicated.

    Args:
        level: Log level name (defaults to LOG_LEVEL, then INFO)
        format_style: simple, detailed or json (defaults to LOG_FORMAT, then simple)
        log_file: Extra file destination (defaults to LOG_FILE, then none)
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if level_name not in LEVELS:
        sys.stderr.write(f"Warning: unknown LOG_LEVEL '{level_name}', using INFO\n")
        level_name = "INFO"
    style = (format_style or os.getenv("LOG_FORMAT") or "simple").lower()
    log_file = log_file or os.getenv("LOG_FILE")

    formatter = build_formatter(style)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level_name)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging configured: level={level_name}, format={style}, file={log_file or '-'}")
