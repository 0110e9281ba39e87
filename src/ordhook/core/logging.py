"""
Logging configuration for the webhook service with structured logging support.
"""

import contextvars
import json
import logging
import logging.handlers
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ordhook.core.settings import LoggingSettings

# Context variable for request tracking; copied into pipeline tasks
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'request_id', default=None
)

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'exc_info', 'exc_text',
    'stack_info', 'pathname', 'processName', 'process', 'threadName',
    'thread', 'relativeCreated', 'taskName', 'request_id', 'message',
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data['request_id'] = request_id

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Console formatter with request ID support."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        request_id = request_id_var.get()
        if request_id:
            record.request_id = f"[{request_id[:8]}]"
        else:
            record.request_id = ""

        return super().format(record)


def setup_logging(settings: Optional[LoggingSettings] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        settings: Logging section of the service settings
        level: Override for the root log level (e.g. "DEBUG")

    Returns:
        The configured root logger
    """
    settings = settings or LoggingSettings()
    structured = settings.log_format in ['structured', 'json']

    root_logger = logging.getLogger()

    # Clear any existing handlers to prevent duplicates
    root_logger.handlers.clear()
    root_logger.setLevel((level or settings.log_level).upper())

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.console_log_level.upper())
    if structured:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter(
            '%(asctime)s %(request_id)s %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
    root_logger.addHandler(console_handler)

    # File handler with rotation
    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            settings.log_dir / settings.log_file_name,
            maxBytes=settings.max_log_size_mb * 1024 * 1024,
            backupCount=settings.backup_count
        )
        file_handler.setLevel(settings.file_log_level.upper())
        if structured:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
            ))
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger


def uvicorn_log_config(settings: LoggingSettings) -> Dict[str, Any]:
    """Logging dictConfig for uvicorn that leaves our root handlers in place."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": settings.log_level.upper(), "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": settings.log_level.upper(), "propagate": False},
        },
    }


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request ID for the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get the current request ID."""
    return request_id_var.get()
