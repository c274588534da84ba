"""
Logging system for lockgraph.
"""

from .logger_config import (
    setup_logging, get_logger, set_log_level, close_logging, LoggerConfig, LoggingManager
)
from .log_formatter import StructuredFormatter, ColoredFormatter

__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_level",
    "close_logging",
    "LoggerConfig",
    "LoggingManager",
    "StructuredFormatter",
    "ColoredFormatter"
]
