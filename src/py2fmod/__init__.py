# py2fmod package
"""
Bulk audio import into FMOD Studio over its scripting console.
"""

__version__ = "0.1.0"

from .models.settings import ImporterSettings
from .models.import_result import ImportRejection, ImportResult
from .services.import_service import ImportService

__all__ = [
    "ImporterSettings",
    "ImportRejection",
    "ImportResult",
    "ImportService",
]
