"""Error Handling for timedim

Error taxonomy of the temporal engine and a small handler that callers use
to log a failed dimension and move on to the next layer.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type

from .logging_manager import LoggingManager


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TimeDimensionError(Exception):
    """Base exception class for the temporal engine."""

    def __init__(self, message: str, value: Any = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM):
        self.message = message
        self.value = value
        self.severity = severity
        full_message = f"{message}: {value!r}" if value is not None else message
        super().__init__(full_message)


class InvalidDateError(TimeDimensionError):
    """A mandatory date does not parse as any recognized representation."""

    def __init__(self, value: Any):
        super().__init__("Invalid Date", value)


class InvalidTimeDimensionError(TimeDimensionError):
    """Dimension values match none of the discrete/relative/absolute shapes."""

    def __init__(self, value: Any, reason: Optional[str] = None):
        message = "Invalid Time Dimension"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, value)
        self.reason = reason


class InvalidTimeDimensionDurationError(TimeDimensionError):
    """A duration component is not a valid ISO 8601 duration."""

    def __init__(self, value: Any):
        super().__init__("Invalid Time Dimension Duration", value)


class InvalidDateFormatError(TimeDimensionError):
    """A date format cannot be decomposed into consistent fragments."""

    def __init__(self, value: Any, reason: Optional[str] = None):
        message = "Invalid date format"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, value)
        self.reason = reason


class DateNormalizationFailedError(TimeDimensionError):
    """The input format could not be reduced to a valid UTC date string."""

    def __init__(self, value: Any, normalized: Optional[str] = None):
        super().__init__("Date normalization failed", value)
        self.normalized = normalized


class ConfigurationError(TimeDimensionError):
    """Error raised when configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(message, severity=ErrorSeverity.HIGH)


class ErrorHandler:
    """Logs temporal errors by severity and dispatches registered callbacks."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize error handler.

        Args:
            logger: Logger to report to, defaults to this module's logger
        """
        self.logger = logger or LoggingManager.get_logger(__name__)
        self.error_callbacks: Dict[Type[Exception], Callable[[Exception], None]] = {}

    def register_error_callback(self, exception_type: Type[Exception],
                                callback: Callable[[Exception], None]):
        """Register a callback for specific exception types.

        Args:
            exception_type: The exception type to handle
            callback: Function to call when this exception occurs
        """
        self.error_callbacks[exception_type] = callback

    def handle_error(self, error: Exception, context: Optional[str] = None) -> bool:
        """Handle an error with appropriate logging.

        Args:
            error: The exception that occurred
            context: Additional context, typically the layer path

        Returns:
            True if the error belongs to the temporal engine and the caller
            may skip the affected dimension, False otherwise
        """
        severity = self._get_error_severity(error)
        message = self._format_error_message(error, context)
        self._log_error(message, severity)

        for exception_type, callback in self.error_callbacks.items():
            if isinstance(error, exception_type):
                callback(error)
                break

        return isinstance(error, TimeDimensionError)

    def _get_error_severity(self, error: Exception) -> ErrorSeverity:
        if isinstance(error, TimeDimensionError):
            return error.severity

        severity_map = {
            ValueError: ErrorSeverity.MEDIUM,
            TypeError: ErrorSeverity.HIGH,
            MemoryError: ErrorSeverity.CRITICAL,
        }
        return severity_map.get(type(error), ErrorSeverity.HIGH)

    def _format_error_message(self, error: Exception, context: Optional[str] = None) -> str:
        message = str(error)
        if context:
            message = f"{context}: {message}"
        return message

    def _log_error(self, message: str, severity: ErrorSeverity):
        log_methods = {
            ErrorSeverity.LOW: self.logger.info,
            ErrorSeverity.MEDIUM: self.logger.warning,
            ErrorSeverity.HIGH: self.logger.error,
            ErrorSeverity.CRITICAL: self.logger.critical,
        }
        log_methods[severity](message)
