"""
Parsing of FMOD Studio console replies.

The console echoes script results as ``out(): <value>`` somewhere inside
free-form output (banners, prompts, log lines). Only the project path is
consumed programmatically, so a two-tier search is enough: find the marker,
then cut the value at the project file extension.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

OUTPUT_MARKER = "out():"
PROJECT_EXTENSION = ".fspro"

_TRIM_QUOTES = "'\""


def extract_project_path(raw_response: Optional[str]) -> Optional[str]:
    """
    Extract the project file path from a console reply.

    Args:
        raw_response: Raw text returned by the console

    Returns:
        Project path, a best-effort trimmed remainder when the extension is
        missing, or None when the marker is absent

    Example:
        >>> extract_project_path("> out(): 'C:/proj/MyGame.fspro'\\n>")
        'C:/proj/MyGame.fspro'
    """
    if not raw_response:
        logger.warning("Received empty response for project path.")
        return None

    lowered = raw_response.lower()
    marker_index = lowered.find(OUTPUT_MARKER)
    if marker_index == -1:
        logger.warning(f"Could not find marker '{OUTPUT_MARKER}' in console response.")
        return None

    remainder = raw_response[marker_index + len(OUTPUT_MARKER):]

    extension_index = remainder.lower().find(PROJECT_EXTENSION)
    if extension_index != -1:
        candidate = remainder[:extension_index + len(PROJECT_EXTENSION)]
        path = candidate.strip().strip(_TRIM_QUOTES)
        logger.info(f"Parsed project path: '{path}'")
        return path

    logger.warning(
        f"Found '{OUTPUT_MARKER}' but no '{PROJECT_EXTENSION}' after it; falling back to the trimmed remainder."
    )
    path = remainder.strip().strip(_TRIM_QUOTES)
    logger.info(f"Fallback project path: '{path}'")
    return path
