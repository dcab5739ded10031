# src/py2fmod/services/file_grouping_service.py
"""
Audio file discovery, classification and grouping.

Files are classified by the suffix of their stem (``kick_m.wav`` is a Multi
instrument named ``kick``) and grouped by folder, base name and instrument
type. Every group becomes one event in FMOD Studio.
"""

import logging
import os
from typing import Dict, Iterable, List, Tuple

from py2fmod.core.errors import DataError, ErrorCodes
from py2fmod.models.file_group import FileGroup, InstrumentType, SuffixRules, make_group_key

logger = logging.getLogger(__name__)

SUPPORTED_AUDIO_EXTENSIONS = (".wav", ".aiff", ".aif", ".ogg", ".mp3")


def is_supported_audio_file(path: str) -> bool:
    return path.lower().endswith(SUPPORTED_AUDIO_EXTENSIONS)


def scan_audio_files(root: str) -> List[str]:
    """
    Recursively list supported audio files under ``root``.

    The walk is top-down with sorted names, so the files of a folder come
    before the files of its subfolders and the order is stable across runs.

    Args:
        root: Directory to scan

    Returns:
        File paths in discovery order

    Raises:
        DataError: If ``root`` itself cannot be listed
    """
    def on_error(error: OSError) -> None:
        if os.path.abspath(error.filename or "") == os.path.abspath(root):
            code = ErrorCodes.ACCESS_DENIED if isinstance(error, PermissionError) else ErrorCodes.FOLDER_NOT_FOUND
            raise DataError(f"Cannot list folder: {error.strerror}", file_path=root, error_code=code, cause=error)
        logger.warning(f"Skipping unreadable folder '{error.filename}': {error.strerror}")

    found = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            if is_supported_audio_file(name):
                found.append(os.path.join(dirpath, name))

    logger.info(f"Found {len(found)} supported audio files under '{root}'")
    return found


def _ends_with(stem: str, suffix: str) -> bool:
    return bool(suffix) and stem.lower().endswith(suffix.lower())


def classify_stem(stem: str, rules: SuffixRules) -> Tuple[str, InstrumentType, bool]:
    """
    Determine base name and instrument type of a file stem.

    Multi is checked before Scatterer and the first match wins; its suffix
    is stripped from the base name. The Spatializer suffix is only reported.

    Args:
        stem: File name without extension
        rules: Suffix configuration

    Returns:
        Tuple of (base_name, instrument_type, has_spatializer)
    """
    has_spatializer = _ends_with(stem, rules.spatializer)

    if _ends_with(stem, rules.multi):
        return stem[:len(stem) - len(rules.multi)], InstrumentType.MULTI, has_spatializer
    if _ends_with(stem, rules.scatterer):
        return stem[:len(stem) - len(rules.scatterer)], InstrumentType.SCATTERER, has_spatializer
    return stem, InstrumentType.SINGLE, has_spatializer


def relative_folder_path(file_path: str, scan_root: str) -> str:
    """
    Folder of ``file_path`` relative to ``scan_root``, with '/' separators.

    Returns '' for files directly in the root, and '' with a warning for
    files outside it.
    """
    file_dir = os.path.abspath(os.path.dirname(file_path))
    root = os.path.abspath(scan_root)

    try:
        common = os.path.commonpath([os.path.normcase(root), os.path.normcase(file_dir)])
    except ValueError:
        # Different drives on Windows
        common = None

    if common != os.path.normcase(root):
        logger.warning(f"File folder '{file_dir}' is not a descendant of scan root '{root}'; treating as root-level.")
        return ""

    relative = os.path.relpath(file_dir, root)
    if relative == os.curdir:
        return ""
    return relative.replace("\\", "/").strip("/")


def group_files(file_paths: Iterable[str], scan_root: str, rules: SuffixRules) -> List[FileGroup]:
    """
    Group files into future FMOD events.

    Pure and deterministic: groups are ordered by the first occurrence of
    their key, files keep their input order, and the first file of a group
    fixes its attributes.

    Args:
        file_paths: Audio files in discovery order
        scan_root: Folder the files were scanned from
        rules: Suffix configuration for this run

    Returns:
        List of FileGroup
    """
    groups: Dict[str, FileGroup] = {}

    for file_path in file_paths:
        stem = os.path.splitext(os.path.basename(file_path))[0]
        base_name, instrument_type, has_spatializer = classify_stem(stem, rules)
        folder = relative_folder_path(file_path, scan_root)
        key = make_group_key(folder, base_name, instrument_type)

        group = groups.get(key)
        if group is None:
            logger.debug(f"Creating group '{key}' ({instrument_type}) for '{file_path}'")
            group = FileGroup(
                base_name=base_name,
                instrument_type=instrument_type,
                relative_folder_path=folder,
                has_spatializer=has_spatializer,
            )
            groups[key] = group

        group.file_paths.append(file_path)

    logger.info(f"Grouped files into {len(groups)} groups.")
    return list(groups.values())
