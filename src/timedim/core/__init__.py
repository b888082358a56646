"""Core modules for timedim.

Logging, error taxonomy and configuration shared by the temporal processors.
"""

from .logging_manager import LoggingManager
from .error_handler import (
    TimeDimensionError,
    InvalidDateError,
    InvalidTimeDimensionError,
    InvalidTimeDimensionDurationError,
    InvalidDateFormatError,
    DateNormalizationFailedError,
    ConfigurationError,
    ErrorHandler,
    ErrorSeverity
)
from .config_manager import ConfigManager, EngineConfig, LayerDateConfig, LoggingConfig

__all__ = [
    "LoggingManager",
    "TimeDimensionError",
    "InvalidDateError",
    "InvalidTimeDimensionError",
    "InvalidTimeDimensionDurationError",
    "InvalidDateFormatError",
    "DateNormalizationFailedError",
    "ConfigurationError",
    "ErrorHandler",
    "ErrorSeverity",
    "ConfigManager",
    "EngineConfig",
    "LayerDateConfig",
    "LoggingConfig"
]
