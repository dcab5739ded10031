# src/py2fmod/models/__init__.py
"""
Data models for py2fmod.
"""

from .connection import (
    ConnectionConfig,
    ConnectionState,
    ConnectionStatus,
    ConnectionModel
)

from .file_group import (
    InstrumentType,
    SuffixRules,
    FileGroup,
    make_group_key
)

from .settings import ImporterSettings
from .import_result import ImportRejection, ImportResult

__all__ = [
    'ConnectionConfig',
    'ConnectionState',
    'ConnectionStatus',
    'ConnectionModel',
    'InstrumentType',
    'SuffixRules',
    'FileGroup',
    'make_group_key',
    'ImporterSettings',
    'ImportRejection',
    'ImportResult',
]
