"""
Services Module - cross-cutting infrastructure for the Pollution Report backend.

- Logging and observability (logging_config)
"""

from .logging_config import configure_logging, get_logger, log_performance

__all__ = ["configure_logging", "get_logger", "log_performance"]
