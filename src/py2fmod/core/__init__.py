"""
Core layer for the FMOD Studio console.

This package contains the wire-level protocol, the console connection
and the structured error framework.
"""

from .telnet_protocol import TelnetVerb, TelnetOption, encode_line, strip_negotiation
from .telnet_connection import ConsoleConnection
from .errors import (
    ImporterError,
    ConsoleConnectionError,
    ConsoleReadError,
    ConsoleWriteError,
    ConsoleTimeoutError,
    DataError,
    PreconditionError,
    ConfigurationError,
    TemplateError,
    ValidationError,
    ErrorCodes,
    wrap_external_error,
)
from .error_formatting import ErrorFormatter, format_error

__all__ = [
    'TelnetVerb',
    'TelnetOption',
    'encode_line',
    'strip_negotiation',
    'ConsoleConnection',
    # Errors
    'ImporterError',
    'ConsoleConnectionError',
    'ConsoleReadError',
    'ConsoleWriteError',
    'ConsoleTimeoutError',
    'DataError',
    'PreconditionError',
    'ConfigurationError',
    'TemplateError',
    'ValidationError',
    'ErrorCodes',
    'wrap_external_error',
    'ErrorFormatter',
    'format_error',
]
