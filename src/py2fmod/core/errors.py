"""
Unified error handling framework for the FMOD importer.

This module defines the standard error hierarchy and provides consistent
error handling across the application.

Error Code Ranges:
- 1000-1999: Console connection errors
- 4000-4999: Data/File errors
- 5000-5999: Precondition/State errors
- 6000-6999: Configuration and template errors
- 7000-7999: Validation errors
- 8000-8999: Timeout errors
- 9000-9999: Unknown/System errors
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
import traceback


class ImporterError(Exception):
    """
    Base exception for all importer-specific errors.

    Provides structured error information with context tracking.
    """

    # Base error code for unknown errors
    DEFAULT_CODE = 9000

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        suggestions: Optional[List[str]] = None
    ):
        """
        Initialize an importer error.

        Args:
            message: Human-readable error description
            error_code: Numeric error code for categorization
            context: Additional context information (WHERE)
            cause: Original exception if this wraps another error
            suggestions: List of possible solutions or next steps
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.DEFAULT_CODE
        self.context = context or {}
        self.cause = cause
        self.suggestions = suggestions or []
        self.timestamp = datetime.now()

        self.stack_trace = traceback.format_exc() if cause else None

        if cause:
            self.context['original_error'] = str(cause)
            self.context['original_type'] = type(cause).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'code': self.error_code,
            'context': self.context,
            'suggestions': self.suggestions,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
            'stack_trace': self.stack_trace
        }

    def format_user_message(self) -> str:
        """Format error for user display (without technical details)."""
        msg = f"{self.message}"
        if self.suggestions:
            msg += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                msg += f"\n  {i}. {suggestion}"
        return msg

    def format_log_message(self) -> str:
        """Format error for logging (with all details)."""
        parts = [
            f"[{self.error_code}] {self.__class__.__name__}: {self.message}"
        ]

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        if self.stack_trace:
            parts.append(f"Stack trace:\n{self.stack_trace}")

        return " | ".join(parts)


class ConsoleConnectionError(ImporterError):
    """Transport failures on the console stream: refused, reset, closed."""
    DEFAULT_CODE = 1001

    def __init__(self, message: str, endpoint: Optional[tuple] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONNECTION'
        if endpoint is not None:
            kwargs['context']['endpoint'] = f"{endpoint[0]}:{endpoint[1]}"
        super().__init__(message, **kwargs)


class ConsoleReadError(ConsoleConnectionError):
    """Fatal I/O fault while reading a console reply."""
    DEFAULT_CODE = 1006


class ConsoleWriteError(ConsoleConnectionError):
    """Fatal I/O fault while writing commands to the console."""
    DEFAULT_CODE = 1007


class DataError(ImporterError):
    """Errors related to scanned folders, file I/O and parsing."""
    DEFAULT_CODE = 4001

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'DATA'
        if file_path:
            kwargs['context']['file_path'] = file_path
        super().__init__(message, **kwargs)


class PreconditionError(ImporterError):
    """A request was refused because the importer is not in a state to run it."""
    DEFAULT_CODE = 5004

    def __init__(self, message: str, reason: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'PRECONDITION'
        if reason:
            kwargs['context']['reason'] = reason
        super().__init__(message, **kwargs)


class ConfigurationError(ImporterError):
    """Errors related to application configuration and settings."""
    DEFAULT_CODE = 6001

    def __init__(self, message: str, setting_name: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONFIGURATION'
        if setting_name:
            kwargs['context']['setting'] = setting_name
        super().__init__(message, **kwargs)


class TemplateError(ConfigurationError):
    """Script templates are missing, unreadable or unusable."""
    DEFAULT_CODE = 6005

    def __init__(self, message: str, missing: Optional[List[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        if missing:
            self.context['missing_templates'] = list(missing)


class ValidationError(ImporterError):
    """Errors related to input validation and parameter checking."""
    DEFAULT_CODE = 7001

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'VALIDATION'
        if field_name:
            kwargs['context']['field'] = field_name
        super().__init__(message, **kwargs)


class ConsoleTimeoutError(ImporterError):
    """A connect or read exceeded its time bound."""
    DEFAULT_CODE = 8001

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'TIMEOUT'
        if timeout_seconds is not None:
            kwargs['context']['timeout_seconds'] = timeout_seconds
        super().__init__(message, **kwargs)


class ErrorCodes:
    """Standard error codes for common error scenarios."""

    # Connection errors (1000-1999)
    CONNECTION_TIMEOUT = 1002
    CONNECTION_LOST = 1003
    SOCKET_ERROR = 1004
    CONNECTION_CANCELLED = 1005
    READ_FAILED = 1006
    WRITE_FAILED = 1007

    # Data errors (4000-4999)
    FOLDER_NOT_FOUND = 4001
    ACCESS_DENIED = 4006

    # Precondition errors (5000-5999)
    NOT_CONNECTED = 5001
    OPERATION_IN_PROGRESS = 5002
    INVALID_FOLDER = 5003
    STATE_ERROR = 5004

    # Configuration errors (6000-6999)
    CONFIG_SAVE_ERROR = 6003
    TEMPLATE_MISSING = 6005

    # Validation errors (7000-7999)
    INVALID_PARAMETER = 7001

    # Timeout errors (8000-8999)
    RESPONSE_TIMEOUT = 8002

    # System errors (9000-9999)
    UNKNOWN_ERROR = 9000


def wrap_external_error(e: Exception, message: str, error_class=ImporterError, **context) -> ImporterError:
    """
    Wrap an external exception in an ImporterError.

    Args:
        e: The original exception
        message: Context-specific error message
        error_class: The ImporterError subclass to use
        **context: Additional context information

    Returns:
        An ImporterError instance wrapping the original exception
    """
    return error_class(
        message=message,
        cause=e,
        context=context
    )
