"""
Settings persistence for the importer.

Settings are stored as YAML (``.yaml``/``.yml``) or JSON (anything else).
A missing or unreadable file is not an error: the importer falls back to
its defaults so a first run works without any setup.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

import yaml

from ..core.errors import ConfigurationError, ErrorCodes
from ..models.settings import ImporterSettings


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "py2fmod_settings.yaml"

_YAML_SUFFIXES = ('.yaml', '.yml')


class ConfigurationService:
    """Loads and saves ImporterSettings."""

    def __init__(self, settings_file: Union[str, Path] = DEFAULT_SETTINGS_FILE):
        """Initialize configuration service.

        Args:
            settings_file: Path of the settings file
        """
        self.settings_file = Path(settings_file)

    @property
    def is_yaml(self) -> bool:
        return self.settings_file.suffix.lower() in _YAML_SUFFIXES

    def load(self) -> ImporterSettings:
        """Load settings, falling back to defaults.

        Returns:
            ImporterSettings read from file, or defaults if the file is
            missing or invalid
        """
        if not self.settings_file.exists():
            logger.info(f"Settings file not found: {self.settings_file}. Using default settings.")
            return ImporterSettings()

        try:
            data = self._read()
            settings = ImporterSettings.from_dict(data)
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.error(f"Error loading settings from {self.settings_file}: {e}. Using default settings.")
            return ImporterSettings()

        valid, errors = settings.validate()
        if not valid:
            logger.error(f"Invalid settings in {self.settings_file}: {'; '.join(errors)}. Using default settings.")
            return ImporterSettings()

        logger.info(f"Loaded settings from {self.settings_file}")
        return settings

    def save(self, settings: ImporterSettings) -> None:
        """Save settings to the settings file.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        data = settings.to_dict()
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                if self.is_yaml:
                    yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
                else:
                    json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings to {self.settings_file}: {e}")
            raise ConfigurationError(
                f"Could not save settings to {self.settings_file}",
                setting_name=str(self.settings_file),
                error_code=ErrorCodes.CONFIG_SAVE_ERROR,
                cause=e
            ) from e

        logger.info(f"Saved settings to {self.settings_file}")

    def _read(self) -> Optional[Dict[str, Any]]:
        with open(self.settings_file, 'r', encoding='utf-8') as f:
            if self.is_yaml:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping at top level, got {type(data).__name__}")
        return data
