"""
Logger configuration and setup for lockgraph.
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config import AppConfig, get_config
from .log_formatter import ColoredFormatter, StructuredFormatter

PACKAGE_LOGGER = "lockgraph"


@dataclass
class LoggerConfig:
    """Handler settings for the lockgraph logger."""
    level: str = "INFO"
    file_path: Optional[str] = None
    format_string: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    enable_console: bool = True
    enable_structured: bool = False
    enable_colors: bool = True

    @classmethod
    def from_app_config(cls, app_config: AppConfig, level: Optional[str] = None) -> "LoggerConfig":
        """
        Build handler settings from the ``logging`` configuration section.

        Args:
            app_config: Loaded application configuration
            level: Level overriding the configured one (e.g. from ``-v``)
        """
        section = app_config.logging
        return cls(
            level=level or section.level,
            file_path=section.file,
            format_string=section.format,
            max_file_size=section.max_file_size,
            backup_count=section.backup_count,
            enable_structured=section.structured,
        )


def _level(name: str) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else logging.INFO


class LoggingManager:
    """
    Owns the handlers attached to the ``lockgraph`` package logger.

    Only the package logger is configured, so an embedding application keeps
    control of the root logger. Console output goes to stderr because the
    resolved module lists are written to stdout.
    """

    def __init__(self, logger_name: str = PACKAGE_LOGGER):
        self.logger_name = logger_name
        self.config: Optional[LoggerConfig] = None
        self._handlers: List[logging.Handler] = []

    @property
    def configured(self) -> bool:
        return self.config is not None

    def setup_logging(self, config: Optional[LoggerConfig] = None) -> None:
        """
        Attach handlers once; later calls are ignored until ``close_handlers``.

        Args:
            config: Handler settings, derived from the application
                configuration when omitted
        """
        if self.configured:
            return

        config = config or LoggerConfig.from_app_config(get_config())
        logger = logging.getLogger(self.logger_name)
        logger.setLevel(_level(config.level))
        logger.propagate = False

        if config.enable_console:
            self._attach(logger, self._console_handler(config))
        if config.file_path:
            self._attach(logger, self._file_handler(config))

        self.config = config
        logger.debug(f"Logging configured at {config.level} with {len(self._handlers)} handler(s)")

    def _attach(self, logger: logging.Logger, handler: logging.Handler) -> None:
        logger.addHandler(handler)
        self._handlers.append(handler)

    def _console_handler(self, config: LoggerConfig) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        if config.enable_structured:
            handler.setFormatter(StructuredFormatter())
        elif config.enable_colors and sys.stderr.isatty():
            handler.setFormatter(ColoredFormatter(config.format_string))
        else:
            handler.setFormatter(logging.Formatter(config.format_string))
        return handler

    def _file_handler(self, config: LoggerConfig) -> logging.Handler:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Rotates at max_file_size megabytes
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=config.max_file_size * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        formatter = StructuredFormatter() if config.enable_structured else logging.Formatter(config.format_string)
        handler.setFormatter(formatter)
        return handler

    def set_level(self, level: str) -> None:
        """Change the level of the package logger."""
        logging.getLogger(self.logger_name).setLevel(_level(level))

    def close_handlers(self) -> None:
        """Detach and close every handler so logging can be set up again."""
        logger = logging.getLogger(self.logger_name)
        while self._handlers:
            handler = self._handlers.pop()
            logger.removeHandler(handler)
            handler.close()

        logger.propagate = True
        self.config = None


_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggerConfig] = None) -> None:
    """Configure lockgraph logging for the process."""
    _logging_manager.setup_logging(config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    _logging_manager.set_level(level)


def close_logging() -> None:
    _logging_manager.close_handlers()
