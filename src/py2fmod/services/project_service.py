# src/py2fmod/services/project_service.py
"""
Service for querying the open FMOD Studio project over the console.
"""

import logging
from typing import Optional

from py2fmod.core.errors import ConsoleConnectionError, ConsoleTimeoutError
from py2fmod.core.telnet_connection import ConsoleConnection
from py2fmod.core.telnet_protocol import PROJECT_QUERY_TIMEOUT
from py2fmod.services.response_parser import extract_project_path

PROJECT_PATH_QUERY = "studio.project.filePath"


class ProjectService:
    """
    Reads project identity from a live console connection.

    A missing project path is not fatal for the import flow, so every
    failure here degrades to ``None``.
    """

    def __init__(self, query_timeout: float = PROJECT_QUERY_TIMEOUT):
        """
        Initialize the project service.

        Args:
            query_timeout: Seconds to wait for the console reply
        """
        self.query_timeout = query_timeout
        self.logger = logging.getLogger(__name__)

    def fetch_project_path(self, connection: Optional[ConsoleConnection]) -> Optional[str]:
        """
        Ask the console for the path of the open project.

        Args:
            connection: Live console connection

        Returns:
            Project file path, or None if it could not be obtained
        """
        if connection is None or not connection.is_connected:
            self.logger.warning("Cannot query project path: console connection is not active.")
            return None

        try:
            connection.write_single(PROJECT_PATH_QUERY)
            response = connection.read_response(self.query_timeout)
        except ConsoleTimeoutError as e:
            self.logger.error(f"Timeout while waiting for project path response: {e.message}")
            return None
        except ConsoleConnectionError as e:
            self.logger.error(f"Console error while querying project path: {e.message}")
            return None

        self.logger.debug(f"Received raw project path response: {response!r}")
        return extract_project_path(response)
