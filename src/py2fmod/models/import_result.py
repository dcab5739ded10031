"""Outcome of an import request."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from py2fmod.core.errors import ErrorCodes


class ImportRejection(Enum):
    """Why an import request was refused before any work was done."""

    BUSY = "Error: Another operation is in progress"
    NOT_CONNECTED = "Error: Not connected"
    TEMPLATES_MISSING = "Error: JS scripts not loaded."
    INVALID_FOLDER = "Error: Invalid folder"

    @property
    def status_text(self) -> str:
        return self.value

    @property
    def error_code(self) -> int:
        return _REJECTION_CODES[self]


_REJECTION_CODES = {
    ImportRejection.BUSY: ErrorCodes.OPERATION_IN_PROGRESS,
    ImportRejection.NOT_CONNECTED: ErrorCodes.NOT_CONNECTED,
    ImportRejection.TEMPLATES_MISSING: ErrorCodes.TEMPLATE_MISSING,
    ImportRejection.INVALID_FOLDER: ErrorCodes.INVALID_FOLDER,
}


@dataclass
class ImportResult:
    """
    Result of ``ImportService.import_folder``.

    Attributes:
        success: True when the import ran to completion (an empty folder counts)
        rejection: Precondition that refused the request, None if it was accepted
        error: Message of the fatal error that aborted an accepted import
        files_found: Number of supported audio files found
        group_keys: Keys of the generated groups, in transmission order
        commands_sent: Number of command blocks written to the console
    """

    success: bool
    rejection: Optional[ImportRejection] = None
    error: Optional[str] = None
    files_found: int = 0
    group_keys: List[str] = field(default_factory=list)
    commands_sent: int = 0

    @property
    def groups_created(self) -> int:
        return len(self.group_keys)

    @classmethod
    def rejected(cls, reason: ImportRejection) -> "ImportResult":
        return cls(success=False, rejection=reason)
