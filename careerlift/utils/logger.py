import contextvars
import logging
import json
import os
import sys
from pathlib import Path
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

# Extra fields copied onto structured log entries when present
_EXTRA_KEYS = (
    "method", "path", "status", "duration_ms", "client_ip",
    "error", "error_type", "service", "circuit_state",
    "career_goal", "role", "attempt", "wait_seconds", "courses", "opportunities",
    "used_vertex", "analysis_id", "text_length",
)

# Set per request by CorrelationMiddleware
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter with correlation ID injection"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        cid = getattr(record, "correlation_id", None) or correlation_id_var.get()
        if cid:
            entry["correlation_id"] = cid
        if getattr(record, "user_id", None):
            entry["user_id"] = record.user_id

        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.levelno >= logging.WARNING:
            entry["source"] = f"{record.filename}:{record.lineno}"

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for local development"""

    def __init__(self):
        super().__init__(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )


def setup_logger(name: str = "careerlift", level: str = None) -> logging.Logger:
    """
    Setup application logger.

    JSON lines on stdout in production (LOG_FORMAT=json or Railway), a readable
    console format plus a rotating JSON file locally.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    is_production = bool(os.getenv("RAILWAY_ENVIRONMENT")) or os.getenv("LOG_FORMAT") == "json"

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(StructuredFormatter() if is_production else SimpleFormatter())
    logger.addHandler(console_handler)

    if not is_production and os.getenv("LOG_TO_FILE", "true").lower() == "true":
        try:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)

            file_handler = RotatingFileHandler(
                log_dir / "careerlift.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(StructuredFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            # Read-only filesystem on some hosts
            logger.warning(f"Could not setup file logging: {e}")

    return logger


logger = setup_logger()


def get_logger(name: str = None) -> logging.Logger:
    """Get logger instance (children of the app logger share its handlers)"""
    if name:
        return logger.getChild(name)
    return logger
