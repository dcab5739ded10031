"""
Service layer for py2fmod.

Services hold the import logic: parsing console replies, grouping audio
files, generating console commands and orchestrating a whole import.
"""

from .response_parser import extract_project_path
from .project_service import ProjectService
from .file_grouping_service import scan_audio_files, classify_stem, group_files
from .script_template_service import ScriptTemplates, ScriptTemplateService
from .command_generation_service import CommandPlan, build_command_plan, generate_commands
from .configuration_service import ConfigurationService
from .import_service import ImportService

__all__ = [
    'extract_project_path',
    'ProjectService',
    'scan_audio_files',
    'classify_stem',
    'group_files',
    'ScriptTemplates',
    'ScriptTemplateService',
    'CommandPlan',
    'build_command_plan',
    'generate_commands',
    'ConfigurationService',
    'ImportService',
]
