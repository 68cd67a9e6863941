"""
Logging Configuration for the Pollution Report backend.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Request and trigger-event correlation via context variables
- Performance metrics tracking
"""

import asyncio
import logging
import json
import sys
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Callable
from functools import wraps
from contextvars import ContextVar

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)
event_id_var: ContextVar[Optional[str]] = ContextVar('event_id', default=None)

_CONTEXT_VARS = (
    ("request_id", request_id_var),
    ("user_id", user_id_var),
    ("event_id", event_id_var),
)


def _context() -> Dict[str, str]:
    return {key: var.get() for key, var in _CONTEXT_VARS if var.get()}


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(_context())

        # Add extra fields from the record
        if hasattr(record, 'extra_data'):
            log_data.update({k: v for k, v in record.extra_data.items() if v is not None})

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human readability."""
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        level = f"{color}{record.levelname:8s}{reset}"

        message = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        extras = dict(_context())
        if hasattr(record, 'extra_data') and record.extra_data:
            extras.update({k: v for k, v in record.extra_data.items() if v is not None})
        if extras:
            message += " | " + ' | '.join(f"{k}={v}" for k, v in extras.items())

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in all log messages.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        """Add context to log message."""
        extra = kwargs.get('extra', {})

        # Merge with any existing extra data
        if 'extra_data' not in extra:
            extra['extra_data'] = {}
        extra['extra_data'].update(self.extra)

        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    root_logger.handlers.clear()

    formatter = JsonFormatter() if json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set levels for noisy libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, extra)


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Decorator to log coroutine performance.

    Args:
        name: Optional name override for the log entry

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        func_name = name or func.__name__

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = get_logger("performance")
            start = time.time()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = int((time.time() - start) * 1000)
                logger.error(
                    f"{func_name} failed",
                    extra={'extra_data': {
                        'duration_ms': duration_ms,
                        'error': str(e),
                    }}
                )
                raise
            duration_ms = int((time.time() - start) * 1000)
            logger.debug(
                f"{func_name} completed",
                extra={'extra_data': {'duration_ms': duration_ms}}
            )
            return result

        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"log_performance expects a coroutine function, got {func_name}")
        return async_wrapper

    return decorator
