"""Centralized Logging Management for timedim

Handles logger naming, log configuration, formatting, and output management.
The package is silent by default; applications opt in through ``configure``.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional, Union

ROOT_LOGGER_NAME = "timedim"


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors for console output."""
        log_message = super().format(record)
        return f"{self.COLORS.get(record.levelname, '')}{log_message}{self.COLORS['RESET']}"


class LoggingManager:
    """Centralized logging configuration and management."""

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False

    def __new__(cls) -> 'LoggingManager':
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize logging manager (only once)."""
        if self._initialized:
            return

        self.loggers: Dict[str, logging.Logger] = {}
        self._setup_package_logger()
        self._initialized = True

    def _setup_package_logger(self):
        """Attach a NullHandler so library use stays quiet until configured."""
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not package_logger.handlers:
            package_logger.addHandler(logging.NullHandler())

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Class method to get logger instance.

        Args:
            name: Logger name (typically __name__ of the module)

        Returns:
            Logger living under the ``timedim`` namespace
        """
        manager = cls()
        return manager._get_logger_instance(name)

    def _get_logger_instance(self, name: str) -> logging.Logger:
        """Internal method to get logger instance."""
        if not name.startswith(ROOT_LOGGER_NAME):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        if name in self.loggers:
            return self.loggers[name]

        logger = logging.getLogger(name)
        self.loggers[name] = logger
        return logger

    def configure(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        log_to_console: bool = True,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5
    ) -> logging.Logger:
        """Configure handlers on the package logger.

        Args:
            level: Log level name or logging constant
            log_file: Optional path of a rotating log file
            log_to_console: Whether to log to stdout with colors
            max_bytes: Rotation size of the log file
            backup_count: Number of rotated files to keep

        Returns:
            The configured package logger
        """
        numeric_level = self._resolve_level(level)
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.setLevel(numeric_level)

        # Clearing existing handlers to avoid duplicates
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(numeric_level)
            console_handler.setFormatter(ColoredFormatter(
                '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
                datefmt='%H:%M:%S'
            ))
            package_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            package_logger.addHandler(file_handler)

        if not package_logger.handlers:
            package_logger.addHandler(logging.NullHandler())

        package_logger.propagate = False
        return package_logger

    def set_log_level(self, level: str):
        """Set the logging level for the package logger and its handlers.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        numeric_level = self._resolve_level(level)
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.setLevel(numeric_level)
        for handler in package_logger.handlers:
            handler.setLevel(numeric_level)

    @staticmethod
    def _resolve_level(level: Union[int, str]) -> int:
        if isinstance(level, int):
            return level
        numeric_level = getattr(logging, str(level).upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f'Invalid log level: {level}')
        return numeric_level
