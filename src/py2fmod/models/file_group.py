"""
File grouping models.

A FileGroup is one future FMOD event: all audio files that share a folder,
a base name and an instrument type end up in the same group.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class InstrumentType(Enum):
    """How the files of a group combine into one playable unit."""

    SINGLE = "Single"
    MULTI = "Multi"
    SCATTERER = "Scatterer"
    SPATIALIZER = "Spatializer"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SuffixRules:
    """
    Filename suffixes that select an instrument type.

    Passed explicitly into every classification call so grouping stays a
    pure function of its inputs.

    Attributes:
        multi: Suffix marking a Multi instrument (e.g. "_m")
        scatterer: Suffix marking a Scatterer instrument (e.g. "_c")
        spatializer: Suffix marking a spatialized event (e.g. "_s"); detected only
    """

    multi: str = "_m"
    scatterer: str = "_c"
    spatializer: str = "_s"


@dataclass
class FileGroup:
    """
    Files destined to become one event in FMOD Studio.

    Attributes:
        base_name: File stem with the instrument suffix removed
        instrument_type: Primary instrument type of the group
        relative_folder_path: Folder relative to the scan root, '/' separated, '' for the root
        file_paths: Member files in discovery order
        has_spatializer: Spatializer suffix seen on the first file of the group
    """

    base_name: str
    instrument_type: InstrumentType
    relative_folder_path: str = ""
    file_paths: List[str] = field(default_factory=list)
    has_spatializer: bool = False

    @property
    def group_key(self) -> str:
        return make_group_key(self.relative_folder_path, self.base_name, self.instrument_type)

    @property
    def event_path(self) -> str:
        """'folder/event' label used in logs and status text."""
        folder = self.relative_folder_path.strip("/")
        return f"{folder}/{self.base_name}" if folder else self.base_name


def make_group_key(relative_folder_path: str, base_name: str, instrument_type: InstrumentType) -> str:
    """Key shared by all files of one group: '<folder>_<base>_<type>'."""
    return f"{relative_folder_path}_{base_name}_{instrument_type.value}"
