"""
Command-Line Interface - Argument Parsing and Entry Point

This module provides the command-line interface for the FMOD Studio bulk
importer. It handles:
- Command-line argument parsing
- Argument validation
- Merging CLI overrides into the stored settings
- Running a connect (and optionally an import) with status output

Usage:
    python -m py2fmod /path/to/audio
    python -m py2fmod --host 192.168.1.20 --port 3663 /path/to/audio
    python -m py2fmod --help
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from py2fmod.core.error_formatting import format_error
from py2fmod.models.settings import ImporterSettings
from py2fmod.services.configuration_service import ConfigurationService
from py2fmod.services.import_service import ImportService


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: List of arguments to parse. If None, uses sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Bulk audio importer for FMOD Studio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s ./Audio/Ambience
  %(prog)s --host 192.168.1.20 --port 3663 ./Audio
  %(prog)s --settings importer.yaml --templates ./scripts ./Audio

Without a folder the importer only connects and reports the open project.
        """
    )

    parser.add_argument(
        "folder",
        nargs="?",
        default=None,
        help="Folder to import recursively (optional)"
    )

    # Connection arguments (override the settings file)
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="FMOD Studio console host (default: from settings, 127.0.0.1)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="FMOD Studio console port (default: from settings, 3663)"
    )

    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Settings file (.yaml/.yml or .json)"
    )

    parser.add_argument(
        "--templates",
        type=str,
        default=None,
        help="Directory containing fmod_global_setup.js and fmod_import_group.js.template"
    )

    # Suffix arguments
    parser.add_argument("--multi-suffix", type=str, default=None, help="Suffix for Multi instruments (default: _m)")
    parser.add_argument("--scatterer-suffix", type=str, default=None, help="Suffix for Scatterer instruments (default: _c)")
    parser.add_argument("--spatializer-suffix", type=str, default=None, help="Suffix for spatialized events (default: _s)")

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Append log output to this file"
    )

    return parser.parse_args(args)


def validate_args(args: argparse.Namespace) -> bool:
    """Validate parsed command-line arguments.

    Args:
        args: Parsed arguments from parse_args()

    Returns:
        True if arguments are valid, False otherwise
    """
    if args.port is not None and not (1 <= args.port <= 65535):
        print(f"Error: Port must be between 1 and 65535, got {args.port}")
        return False

    if args.host is not None and not args.host.strip():
        print("Error: Host cannot be empty if specified")
        return False

    if args.folder is not None and not Path(args.folder).is_dir():
        print(f"Error: Folder not found: {args.folder}")
        return False

    if args.templates is not None and not Path(args.templates).is_dir():
        print(f"Error: Template directory not found: {args.templates}")
        return False

    return True


def setup_logging(level: str, log_file: Optional[str] = None):
    """Configure application logging.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file receiving the same records (appended)
    """
    numeric_level = getattr(logging, level.upper(), None)
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        datefmt=date_format
    )

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        logging.getLogger().addHandler(file_handler)


def build_settings(args: argparse.Namespace) -> ImporterSettings:
    """Load stored settings and apply command-line overrides.

    Args:
        args: Parsed arguments from parse_args()

    Returns:
        Effective ImporterSettings for this run
    """
    if args.settings:
        settings = ConfigurationService(args.settings).load()
    else:
        settings = ImporterSettings()

    overrides = {
        'host': args.host,
        'port': args.port,
        'template_dir': args.templates,
        'multi_suffix': args.multi_suffix,
        'scatterer_suffix': args.scatterer_suffix,
        'spatializer_suffix': args.spatializer_suffix,
        'log_file': args.log_file,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)

    return settings


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the importer.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:]

    Returns:
        Exit code (0 = success, 1 = error)
    """
    parsed_args = parse_args(args)

    if not validate_args(parsed_args):
        return 1

    settings = build_settings(parsed_args)
    setup_logging(parsed_args.log_level, settings.log_file)

    logger = logging.getLogger(__name__)
    logger.info("Starting FMOD Studio importer...")
    logger.debug(f"Arguments: host={settings.host}, port={settings.port}, folder={parsed_args.folder}")

    valid, errors = settings.validate()
    if not valid:
        for error in errors:
            print(f"Error: {error}")
        return 1

    try:
        with ImportService(settings) as importer:
            importer.add_status_listener(print)

            if not importer.connect():
                return 1

            if parsed_args.folder is None:
                return 0

            result = importer.import_folder(parsed_args.folder)
            logger.info(
                f"Import result: success={result.success}, files={result.files_found}, "
                f"groups={result.groups_created}, commands={result.commands_sent}"
            )
            return 0 if result.success else 1

    except Exception as e:
        logger.exception(f"Fatal error during import: {e}")
        print(format_error(e, 'user'))
        return 1


if __name__ == "__main__":
    sys.exit(main())
