"""
Error formatting utilities for the FMOD importer.

Provides consistent error formatting for user-facing status text and
technical logging.
"""

import traceback

from py2fmod.core.errors import (
    ImporterError,
    ConsoleConnectionError,
    ConsoleTimeoutError,
    ErrorCodes,
)


class ErrorFormatter:
    """
    Formats errors for consistent presentation.

    Handles both ImporterError instances and standard Python exceptions.
    """

    def format_for_user(self, error: Exception) -> str:
        """
        Format error for end-user display.

        Args:
            error: The error to format

        Returns:
            User-friendly error message
        """
        if isinstance(error, ImporterError):
            return error.format_user_message()
        return f"An error occurred: {str(error)}"

    def format_for_log(self, error: Exception, include_trace: bool = True) -> str:
        """
        Format error for technical logging.

        Args:
            error: The error to format
            include_trace: Whether to include stack trace

        Returns:
            Detailed error information for logging
        """
        if isinstance(error, ImporterError):
            return error.format_log_message()

        msg = f"{error.__class__.__name__}: {str(error)}"
        if include_trace:
            msg += f"\nStack trace:\n{traceback.format_exc()}"
        return msg

    def format_status(self, error: Exception, operation: str = "Operation") -> str:
        """
        Format error as a one-line status string for the caller's status bar.

        Args:
            error: The error to format
            operation: Name of the operation that failed ("Connection", "Import")

        Returns:
            Short status text, e.g. "Connection failed (Timeout)"
        """
        if isinstance(error, ConsoleTimeoutError):
            return f"{operation} failed (Timeout)"
        if isinstance(error, ImporterError) and error.error_code == ErrorCodes.CONNECTION_CANCELLED:
            return f"{operation} cancelled"
        if isinstance(error, ConsoleConnectionError):
            original = error.context.get('original_type')
            if original:
                return f"{operation} failed (Socket error: {original})"
            return f"{operation} failed (Connection lost)"
        if isinstance(error, ImporterError):
            return f"{operation} failed ({error.message})"
        return f"{operation} failed (Error: {error.__class__.__name__})"


def format_error(error: Exception, format_type: str = 'user') -> str:
    """
    Convenience function to format an error.

    Args:
        error: The error to format
        format_type: One of 'user', 'log' or 'status'

    Returns:
        Formatted error based on type
    """
    formatter = ErrorFormatter()

    if format_type == 'user':
        return formatter.format_for_user(error)
    elif format_type == 'log':
        return formatter.format_for_log(error)
    elif format_type == 'status':
        return formatter.format_status(error)
    else:
        raise ValueError(f"Unknown format type: {format_type}")
