"""
Logging configuration for the books backend.

- Development: human-readable console lines
- Production: one JSON object per line on stdout

Environment variables:
- LOG_FORMAT: "json" or "console" (default: console when DEBUG)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
"""
import json
import logging
import os
from datetime import datetime, timezone

# LogRecord attributes that are not user-supplied `extra=` fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "exc_info", "exc_text", "stack_info",
    "message", "taskName",
}


def get_logging_config(debug: bool = False) -> dict:
    """Build the Django LOGGING dict."""
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    if log_format == "json":
        formatters = {"default": {"()": "books_project.logging_config.JsonFormatter"}}
    else:
        formatters = {
            "default": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        }

    app_logger = {"handlers": ["console"], "level": log_level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
            "null": {
                "class": "logging.NullHandler",
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": log_level},
            "django": {"handlers": ["console"], "level": log_level, "propagate": False},
            "django.request": {
                "handlers": ["console"],
                "level": log_level if debug else "ERROR",
                "propagate": False,
            },
            "django.db.backends": {
                "handlers": ["null"],
                "level": "INFO",
                "propagate": False,
            },
            "ledger_core": app_logger,
            "celery": app_logger,
        },
    }


class JsonFormatter(logging.Formatter):
    """
    JSON line formatter.

    Fields: timestamp, level, logger, message, plus `exception` when the record
    carries exc_info and `extra` for anything passed via `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extras = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extras[key] = value
            except (TypeError, ValueError):
                extras[key] = str(value)
        if extras:
            log_entry["extra"] = extras

        return json.dumps(log_entry, default=str)
