# src/py2fmod/services/command_generation_service.py
"""
Generation of FMOD Studio console commands from file groups.

The batch for one import is ordered: every asset-import command first, then
one script per group. Group scripts look assets up by path, so the assets
must already be registered when they run.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from py2fmod.core.errors import ErrorCodes, TemplateError
from py2fmod.models.file_group import FileGroup
from py2fmod.services.script_template_service import (
    EVENT_NAME_PLACEHOLDER,
    FILE_PATHS_JSON_PLACEHOLDER,
    INSTRUMENT_TYPE_PLACEHOLDER,
    RELATIVE_FOLDER_PATH_PLACEHOLDER,
    ScriptTemplates,
)

logger = logging.getLogger(__name__)

IMPORTER_LOG_TAG = "[IMPORTER_LOG]"


def escape_script_string(value: Optional[str]) -> str:
    """
    Escape text for a single-quoted JavaScript string literal.

    Backslash is escaped first so the other escapes are not doubled.
    """
    if not value:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def to_script_path(path: str) -> str:
    """Absolute path with forward slashes, as FMOD Studio expects."""
    return os.path.abspath(path).replace("\\", "/")


def asset_import_command(path: str) -> str:
    return f"studio.project.importAudioFile('{escape_script_string(to_script_path(path))}');"


def group_trailer(js_folder: str, js_event: str) -> str:
    """Save the project and print a completion marker naming the group."""
    return (
        "\nstudio.project.save();"
        f"\nstudio.system.print('{IMPORTER_LOG_TAG} Project saved after processing group \"' + "
        f"'{js_folder}' + '/' + '{js_event}' + '\".');"
    )


def render_group_script(group: FileGroup, template: str) -> str:
    """
    Instantiate the group template for one group.

    Args:
        group: Group to render
        template: Template text containing the four placeholders

    Returns:
        Complete script for the group, trailer included
    """
    folder = group.relative_folder_path.replace("\\", "/").strip("/")
    js_event = escape_script_string(group.base_name)
    js_folder = escape_script_string(folder)

    file_paths_json = json.dumps(
        [to_script_path(p) for p in group.file_paths],
        separators=(",", ":"),
    )
    js_file_paths_json = escape_script_string(file_paths_json)

    script = (
        template.replace(EVENT_NAME_PLACEHOLDER, js_event)
        .replace(RELATIVE_FOLDER_PATH_PLACEHOLDER, js_folder)
        .replace(FILE_PATHS_JSON_PLACEHOLDER, js_file_paths_json)
        .replace(INSTRUMENT_TYPE_PLACEHOLDER, group.instrument_type.value)
    )
    return script + group_trailer(js_folder, js_event)


@dataclass
class CommandPlan:
    """
    Commands for one import, split by phase.

    Attributes:
        asset_commands: One import command per file, in group then file order
        group_scripts: One script per group, in group order
    """

    asset_commands: List[str] = field(default_factory=list)
    group_scripts: List[str] = field(default_factory=list)

    @property
    def commands(self) -> List[str]:
        """Transmission order: all assets, then all group scripts."""
        return self.asset_commands + self.group_scripts

    def __len__(self) -> int:
        return len(self.asset_commands) + len(self.group_scripts)


def _require_templates(templates: Optional[ScriptTemplates]) -> ScriptTemplates:
    if templates is None or not templates.is_complete:
        missing = templates.missing() if templates is not None else ["all templates"]
        raise TemplateError(
            "Script templates are not loaded; refusing to generate commands",
            missing=missing,
            error_code=ErrorCodes.TEMPLATE_MISSING,
            suggestions=["Check that both template files exist in the template directory"],
        )
    return templates


def build_command_plan(groups: Sequence[FileGroup], templates: Optional[ScriptTemplates]) -> CommandPlan:
    """
    Build the command plan for a set of groups.

    Raises:
        TemplateError: If either template is missing
    """
    templates = _require_templates(templates)
    plan = CommandPlan()

    for group in groups:
        for file_path in group.file_paths:
            plan.asset_commands.append(asset_import_command(file_path))

    for group in groups:
        script = render_group_script(group, templates.group_template)
        if not plan.group_scripts:
            logger.debug(f"Content of the first generated group script for '{group.event_path}':\n{script}")
        plan.group_scripts.append(script)
        logger.info(
            f"Generated script for group '{group.event_path}' ({group.instrument_type}), "
            f"block {len(plan.asset_commands) + len(plan.group_scripts)}."
        )

    return plan


def generate_commands(groups: Sequence[FileGroup], templates: Optional[ScriptTemplates]) -> List[str]:
    """
    Ordered command texts for one import.

    Args:
        groups: File groups in group order
        templates: Loaded script templates

    Returns:
        Asset-import commands followed by group scripts

    Raises:
        TemplateError: If either template is missing
    """
    return build_command_plan(groups, templates).commands
