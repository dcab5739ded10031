# src/py2fmod/services/import_service.py
"""
Service orchestrating a bulk import into FMOD Studio.

The service owns the single console connection and sequences the work:
connect, query the open project, send the global setup script once, then
for every import request scan, group, generate and transmit.

Callers observe progress two ways: human-readable status text through
``add_status_listener`` and structured state through the ConnectionModel
(``add_observer``). Neither mechanism assumes a particular calling thread.
"""
import logging
import os
import threading
from datetime import datetime
from typing import Callable, List, Optional

from py2fmod.core.error_formatting import ErrorFormatter
from py2fmod.core.errors import (
    ConsoleConnectionError,
    DataError,
    ErrorCodes,
    ImporterError,
    PreconditionError,
    ValidationError,
    wrap_external_error,
)
from py2fmod.core.telnet_connection import ConsoleConnection
from py2fmod.models.connection import (
    ConnectionConfig,
    ConnectionModel,
    ConnectionState,
    ConnectionStatus,
)
from py2fmod.models.import_result import ImportRejection, ImportResult
from py2fmod.models.settings import ImporterSettings
from py2fmod.services.command_generation_service import build_command_plan
from py2fmod.services.file_grouping_service import group_files, scan_audio_files
from py2fmod.services.project_service import ProjectService
from py2fmod.services.script_template_service import ScriptTemplates, ScriptTemplateService

StatusListener = Callable[[str], None]


class ImportService:
    """
    Connect-and-import workflow for FMOD Studio.

    At most one import runs at a time. A new ``connect()`` supersedes an
    attempt that is still in flight by disposing its connection, which
    cancels whatever I/O it is blocked on.

    Attributes:
        settings: Importer settings (endpoint, suffixes, template directory)
        templates: Loaded script templates
        model: Observable connection state
        logger: Logger instance

    Example:
        >>> with ImportService(ImporterSettings()) as importer:
        ...     importer.add_status_listener(print)
        ...     if importer.connect():
        ...         result = importer.import_folder("/audio/ambience")
    """

    def __init__(
        self,
        settings: Optional[ImporterSettings] = None,
        templates: Optional[ScriptTemplates] = None,
        connection_factory: Callable[..., ConsoleConnection] = ConsoleConnection,
        project_service: Optional[ProjectService] = None
    ):
        """
        Initialize the import service.

        Args:
            settings: Importer settings. If None, defaults are used.
            templates: Preloaded script templates. If None, they are read
                from ``settings.template_dir``.
            connection_factory: Callable creating a ConsoleConnection
            project_service: Service used to query the project path
        """
        self.settings = settings or ImporterSettings()
        self.connection_factory = connection_factory
        self.project_service = project_service or ProjectService()
        self.template_service = ScriptTemplateService(self.settings.template_dir)
        self.templates = templates if templates is not None else self.template_service.load()

        self.model = ConnectionModel()
        self.error_formatter = ErrorFormatter()
        self.logger = logging.getLogger(__name__)

        self._connection: Optional[ConsoleConnection] = None
        self._pending: Optional[ConsoleConnection] = None
        self._state_lock = threading.RLock()
        self._import_lock = threading.Lock()
        self._status_listeners: List[StatusListener] = []

    # ========== Observation ==========

    @property
    def status(self) -> ConnectionStatus:
        return self.model.status

    @property
    def state(self) -> ConnectionState:
        return self.model.state

    @property
    def is_connected(self) -> bool:
        connection = self._connection
        return connection is not None and connection.is_connected

    @property
    def project_path(self) -> Optional[str]:
        return self.model.status.project_path

    def add_observer(self, callback: Callable[[ConnectionStatus], None]) -> None:
        """Register a callback for ConnectionStatus changes."""
        self.model.add_observer(callback)

    def remove_observer(self, callback: Callable[[ConnectionStatus], None]) -> None:
        self.model.remove_observer(callback)

    def add_status_listener(self, callback: StatusListener) -> None:
        """Register a callback receiving status text."""
        if callback not in self._status_listeners:
            self._status_listeners.append(callback)

    def remove_status_listener(self, callback: StatusListener) -> None:
        if callback in self._status_listeners:
            self._status_listeners.remove(callback)

    def _update_status(self, text: str) -> None:
        self.logger.info(f"Status: {text}")
        for listener in list(self._status_listeners):
            try:
                listener(text)
            except Exception as e:
                self.logger.error(f"Status listener {listener!r} raised: {e}")

    def _set_state(self, state: ConnectionState, **changes) -> None:
        self.model.status = self.model.status.with_state(state, **changes)

    def _set_disconnected(self, last_error: Optional[str] = None) -> None:
        self.model.status = ConnectionStatus(state=ConnectionState.DISCONNECTED, last_error=last_error)

    def _is_current(self, connection: ConsoleConnection) -> bool:
        with self._state_lock:
            return connection is self._connection or connection is self._pending

    # ========== Connection ==========

    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> bool:
        """
        Connect to the console and initialize the session.

        Queries the project path and sends the global setup script. Failures,
        including unexpected ones, are reported through status text and the
        return value and leave the service Disconnected.

        Args:
            host: Host overriding ``settings.host``
            port: Port overriding ``settings.port``

        Returns:
            True if the console connection is live
        """
        host = host if host is not None else self.settings.host
        port = port if port is not None else self.settings.port

        config = ConnectionConfig(host=host, port=port, timeout=self.settings.connect_timeout)
        valid, errors = config.validate()
        if not valid:
            error = ValidationError(
                f"Invalid console endpoint: {'; '.join(errors)}",
                field_name="endpoint",
                error_code=ErrorCodes.INVALID_PARAMETER
            )
            self.logger.error(error.format_log_message())
            self._update_status(f"Connection failed ({error.message})")
            return False

        with self._state_lock:
            if self.model.state == ConnectionState.IMPORTING:
                self._update_status(ImportRejection.BUSY.status_text)
                return False

            if self._pending is not None:
                self.logger.info("Superseding in-flight connection attempt.")
                self._pending.dispose()
                self._pending = None
            if self._connection is not None:
                self._connection.dispose()
                self._connection = None

            try:
                connection = self.connection_factory(host, port, connect_timeout=config.timeout)
            except Exception as e:
                self.logger.exception(f"Could not create console connection to {host}:{port}")
                error = wrap_external_error(e, f"Unexpected error while connecting: {type(e).__name__}")
                status = self.error_formatter.format_status(error, "Connection")
                self._set_disconnected(last_error=status)
                self._update_status(status)
                return False

            self._pending = connection
            self.model.status = ConnectionStatus(state=ConnectionState.CONNECTING, host=host, port=port)

        try:
            return self._establish(connection, host, port)
        except Exception as e:
            self.logger.exception(f"Unexpected error while connecting to {host}:{port}")
            with self._state_lock:
                superseded = connection is not self._pending and connection is not self._connection
                if self._pending is connection:
                    self._pending = None
            if superseded:
                connection.dispose()
                return False
            error = wrap_external_error(e, f"Unexpected error while connecting: {type(e).__name__}")
            return self._fail_connect(connection, error)

    def _establish(self, connection: ConsoleConnection, host: str, port: int) -> bool:
        self._update_status(f"Connecting to {host}:{port}...")

        connected = connection.connect()

        with self._state_lock:
            if self._pending is not connection:
                # A newer connect() owns the status now
                connection.dispose()
                return False
            self._pending = None

            if not connected:
                return self._fail_connect(connection, connection.last_error)

            self._connection = connection

        project_path = self.project_service.fetch_project_path(connection)
        if not self._is_current(connection):
            return False
        if not connection.is_connected:
            return self._fail_connect(connection, connection.last_error)

        if project_path:
            self.logger.info(f"Received project path: {project_path}")
        else:
            self.logger.warning("Could not retrieve project path.")

        self._set_state(
            ConnectionState.CONNECTED,
            project_path=project_path,
            connected_at=datetime.now(),
            last_error=None
        )
        if project_path:
            self._update_status(f"Connected (Project: {self.model.status.project_name})")
        else:
            self._update_status("Connected (No project info)")

        return self._send_global_setup(connection)

    def _send_global_setup(self, connection: ConsoleConnection) -> bool:
        if not self.templates.global_setup:
            self.logger.error("Global setup script content is missing. Initialization incomplete.")
            self._update_status("Error: Global script missing.")
            return True

        self.logger.info("Sending global setup script.")
        try:
            connection.write_batch([self.templates.global_setup])
        except ConsoleConnectionError as e:
            if not self._is_current(connection):
                return False
            return self._fail_connect(connection, e)

        self.logger.info("Global setup script sent.")
        return True

    def _fail_connect(self, connection: ConsoleConnection, error: Optional[Exception]) -> bool:
        connection.dispose()
        with self._state_lock:
            if self._connection is connection:
                self._connection = None

        if error is None:
            status = "Connection failed"
        else:
            status = self.error_formatter.format_status(error, "Connection")
            self.logger.error(self.error_formatter.format_for_log(error, include_trace=False))

        self._set_disconnected(last_error=status)
        self._update_status(status)
        return False

    def disconnect(self) -> None:
        """Release the console connection and cancel in-flight work."""
        with self._state_lock:
            pending, self._pending = self._pending, None
            connection, self._connection = self._connection, None
            was_connected = self.model.state != ConnectionState.DISCONNECTED

        for conn in (pending, connection):
            if conn is not None:
                conn.dispose()

        if was_connected:
            self._set_disconnected()
            self._update_status("Connection disposed")

    def close(self) -> None:
        self.disconnect()

    def __enter__(self) -> "ImportService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def reload_templates(self) -> ScriptTemplates:
        """Re-read the script templates from the template directory."""
        self.templates = self.template_service.load()
        if not self.templates.is_complete:
            self._update_status("Error reading JS script files. Check logs.")
        return self.templates

    # ========== Import ==========

    def import_folder(self, folder_path: str) -> ImportResult:
        """
        Import every supported audio file below ``folder_path``.

        Args:
            folder_path: Folder to scan recursively

        Returns:
            ImportResult describing what was done or why nothing was
        """
        if not self._import_lock.acquire(blocking=False):
            return self._reject(ImportRejection.BUSY)

        connection = None
        try:
            with self._state_lock:
                rejection = self._check_preconditions(folder_path)
                if rejection is not None:
                    return self._reject(rejection)
                connection = self._connection
                self._set_state(ConnectionState.IMPORTING)

            return self._run_import(connection, folder_path)
        finally:
            try:
                if connection is not None and self.model.state == ConnectionState.IMPORTING:
                    if connection.is_connected:
                        self._set_state(ConnectionState.CONNECTED)
                    else:
                        self._drop_connection(connection)
            finally:
                self._import_lock.release()

    def _check_preconditions(self, folder_path: str) -> Optional[ImportRejection]:
        if self.model.state in (ConnectionState.CONNECTING, ConnectionState.IMPORTING):
            return ImportRejection.BUSY
        if self.model.state != ConnectionState.CONNECTED or not self.is_connected:
            return ImportRejection.NOT_CONNECTED
        if self.templates is None or not self.templates.is_complete:
            return ImportRejection.TEMPLATES_MISSING
        if not folder_path or not os.path.isdir(folder_path):
            return ImportRejection.INVALID_FOLDER
        return None

    def _reject(self, reason: ImportRejection) -> ImportResult:
        error = PreconditionError(
            f"Import rejected: {reason.status_text}",
            reason=reason.name,
            error_code=reason.error_code
        )
        self.logger.warning(error.format_log_message())
        self._update_status(reason.status_text)
        return ImportResult.rejected(reason)

    def _run_import(self, connection: ConsoleConnection, folder_path: str) -> ImportResult:
        if not self.project_path:
            self.logger.warning("Import started but FMOD project path is unknown.")
            self._update_status("Warning: Unknown project path. Import may fail.")

        folder_name = os.path.basename(os.path.normpath(folder_path))
        self._update_status(f"Scanning folder: {folder_name}...")
        result = ImportResult(success=False)

        try:
            files = scan_audio_files(folder_path)
            result.files_found = len(files)
            self._update_status(f"Found {len(files)} audio files.")

            if not files:
                self.logger.warning(f"No supported audio files found in {folder_path}")
                self._update_status("No audio files found.")
                result.success = True
                return result

            groups = group_files(files, folder_path, self.settings.suffix_rules())
            result.group_keys = [group.group_key for group in groups]
            self._update_status(f"Processing {len(groups)} file groups.")

            plan = build_command_plan(groups, self.templates)
            commands = plan.commands
            self._update_status(f"Sending {len(commands)} command blocks to FMOD Studio...")
            connection.write_batch(commands)

            if not connection.is_connected:
                raise ConsoleConnectionError(
                    "Console connection was lost before the batch was sent",
                    endpoint=connection.endpoint,
                    error_code=ErrorCodes.CONNECTION_LOST
                )

            result.commands_sent = len(commands)
            result.success = True
            self._update_status("Import process finished.")
            self.logger.info(
                f"Import of {folder_path} completed: {result.files_found} files, "
                f"{result.groups_created} groups, {result.commands_sent} command blocks."
            )
            return result

        except ConsoleConnectionError as e:
            self.logger.error(self.error_formatter.format_for_log(e, include_trace=False))
            status = self.error_formatter.format_status(e, "Import")
            self._drop_connection(connection, last_error=status)
            self._update_status(status)
            result.error = e.message
            return result

        except DataError as e:
            self.logger.error(self.error_formatter.format_for_log(e, include_trace=False))
            if e.error_code == ErrorCodes.ACCESS_DENIED:
                self._update_status("Error: Access denied")
            else:
                self._update_status("Error: Folder not found")
            result.error = e.message
            return result

        except ImporterError as e:
            self.logger.error(self.error_formatter.format_for_log(e, include_trace=False))
            self._update_status(self.error_formatter.format_status(e, "Import"))
            result.error = e.message
            return result

        except Exception as e:
            self.logger.exception(f"An error occurred during import: {e}")
            self._update_status(f"Error during import: {type(e).__name__}")
            result.error = str(e)
            return result

    def _drop_connection(self, connection: ConsoleConnection, last_error: Optional[str] = None) -> None:
        connection.dispose()
        with self._state_lock:
            if self._connection is connection:
                self._connection = None
        self._set_disconnected(last_error=last_error)
