# ============================================================================
# src/bloodwork_analysis/utils/logging.py
# ============================================================================
"""
Logging setup for the analysis engine.

Records go to stderr (stdout is reserved for CLI output) and optionally to
a file. Request details passed through ``extra=`` (panel, OCR strategy,
parameter id) are kept as top-level keys in JSON output.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Optional

from ..config.logging_config import LoggingSettings, logging_settings

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Keys callers attach with extra={...}
CONTEXT_FIELDS = ("panel", "strategy", "parameter_id", "provider")

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("PIL", "aiohttp.access", "pytesseract")


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_formatter(format_json: bool) -> logging.Formatter:
    if format_json:
        return JsonFormatter()
    return logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)


def setup_logging(
    settings: LoggingSettings = logging_settings,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_json: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        settings: LoggingSettings supplying the defaults
        level: Overrides LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
        log_file: Overrides LOG_FILE
        format_json: Overrides LOG_JSON
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_file = log_file or settings.LOG_FILE
    format_json = settings.LOG_JSON if format_json is None else format_json

    formatter = build_formatter(format_json)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=getattr(logging, level), handlers=handlers, force=True)

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator timing a synchronous stage.

    Success is logged at DEBUG; a failure is logged at WARNING and re-raised.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{operation} failed after {time.perf_counter() - started:.3f}s: {e}")
                raise
            logger.debug(f"{operation} completed in {time.perf_counter() - started:.3f}s")
            return result

        return wrapper
    return decorator
