# src/py2fmod/services/script_template_service.py
"""
Service for loading the FMOD Studio script templates.

Two text assets drive the import: a global setup script sent once after
connecting, and a per-group template with four named placeholders. Their
content is opaque to the importer.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

GLOBAL_SETUP_FILENAME = "fmod_global_setup.js"
GROUP_TEMPLATE_FILENAME = "fmod_import_group.js.template"

EVENT_NAME_PLACEHOLDER = "{EVENT_NAME}"
RELATIVE_FOLDER_PATH_PLACEHOLDER = "{RELATIVE_FOLDER_PATH}"
FILE_PATHS_JSON_PLACEHOLDER = "{FILE_PATHS_JSON}"
INSTRUMENT_TYPE_PLACEHOLDER = "{INSTRUMENT_TYPE}"

GROUP_PLACEHOLDERS = (
    EVENT_NAME_PLACEHOLDER,
    RELATIVE_FOLDER_PATH_PLACEHOLDER,
    FILE_PATHS_JSON_PLACEHOLDER,
    INSTRUMENT_TYPE_PLACEHOLDER,
)


@dataclass(frozen=True)
class ScriptTemplates:
    """
    Loaded script templates; a template that failed to load is None.

    Attributes:
        global_setup: Global setup script, sent as-is
        group_template: Per-group script template with placeholders
    """

    global_setup: Optional[str] = None
    group_template: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.global_setup) and bool(self.group_template)

    def missing(self) -> List[str]:
        names = []
        if not self.global_setup:
            names.append(GLOBAL_SETUP_FILENAME)
        if not self.group_template:
            names.append(GROUP_TEMPLATE_FILENAME)
        return names


class ScriptTemplateService:
    """
    Loads script templates from a directory.

    Attributes:
        template_dir: Directory holding the template files
        logger: Logger instance
    """

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the template service.

        Args:
            template_dir: Template directory. If None, uses the working directory.
        """
        self.template_dir = Path(template_dir) if template_dir else Path.cwd()
        self.logger = logging.getLogger(__name__)

    @property
    def global_setup_path(self) -> Path:
        return self.template_dir / GLOBAL_SETUP_FILENAME

    @property
    def group_template_path(self) -> Path:
        return self.template_dir / GROUP_TEMPLATE_FILENAME

    def load(self) -> ScriptTemplates:
        """
        Read both templates.

        Returns:
            ScriptTemplates; unreadable files are left as None and logged
        """
        self.logger.info(f"Reading script templates from {self.template_dir}")

        global_setup = self._read(self.global_setup_path, "Global setup script")
        group_template = self._read(self.group_template_path, "Import group script template")

        if group_template is not None:
            absent = [p for p in GROUP_PLACEHOLDERS if p not in group_template]
            if absent:
                self.logger.warning(
                    f"Import group script template is missing placeholders: {', '.join(absent)}"
                )

        templates = ScriptTemplates(global_setup=global_setup, group_template=group_template)
        if not templates.is_complete:
            self.logger.error(
                f"One or more script templates could not be read ({', '.join(templates.missing())}). "
                "Import will not work."
            )
        return templates

    def _read(self, path: Path, label: str) -> Optional[str]:
        if not path.is_file():
            self.logger.error(f"{label} not found at: {path}")
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Error reading {label.lower()} {path}: {e}")
            return None

        if not content.strip():
            self.logger.error(f"{label} is empty: {path}")
            return None

        self.logger.info(f"Successfully read {label.lower()}: {path}")
        return content
