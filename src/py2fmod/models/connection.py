"""
Connection models for py2fmod.

This module provides data structures and models for managing the console
connection to FMOD Studio.

Classes:
    ConnectionConfig: Immutable configuration for a connection
    ConnectionState: Enumeration of importer states
    ConnectionStatus: Current status of the connection
    ConnectionModel: Observable model for connection state management
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import PureWindowsPath, PurePosixPath
from typing import Callable, List, Optional, Tuple

from py2fmod.core.telnet_protocol import CONNECT_TIMEOUT, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Immutable configuration for a console connection.

    Attributes:
        host: Host name or address of the machine running FMOD Studio
        port: Console port number (1-65535)
        timeout: Connection timeout in seconds (default: 10.0)

    Example:
        >>> config = ConnectionConfig("127.0.0.1", 3663)
        >>> valid, errors = config.validate()
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = CONNECT_TIMEOUT

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the connection configuration.

        Returns:
            Tuple of (is_valid, list_of_error_messages)
        """
        errors = []

        if not isinstance(self.host, str) or not self.host.strip():
            errors.append(f"Invalid host: {self.host!r}")

        if not isinstance(self.port, int) or isinstance(self.port, bool) or not (1 <= self.port <= 65535):
            errors.append(f"Port out of range (1-65535): {self.port}")

        if self.timeout <= 0:
            errors.append(f"Timeout must be positive: {self.timeout}")

        return (len(errors) == 0, errors)


class ConnectionState(Enum):
    """
    States of the import orchestrator.

    States:
        DISCONNECTED: No live console connection
        CONNECTING: Connect/initialize sequence in progress
        CONNECTED: Console live, ready to import
        IMPORTING: Scan, generation and transmission in progress
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    IMPORTING = "importing"


@dataclass(frozen=True)
class ConnectionStatus:
    """
    Current status of the console connection.

    Attributes:
        state: Current state
        host: Host if connected, None otherwise
        port: Port if connected, None otherwise
        project_path: Path of the open FMOD project, None when unknown
        connected_at: When the connection was established
        last_error: Last error message, None if the last operation succeeded
    """

    state: ConnectionState
    host: Optional[str] = None
    port: Optional[int] = None
    project_path: Optional[str] = None
    connected_at: Optional[datetime] = None
    last_error: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self.state in (ConnectionState.CONNECTED, ConnectionState.IMPORTING)

    @property
    def has_project(self) -> bool:
        """Connected(WithProject) as opposed to Connected(NoProject)."""
        return self.is_connected and bool(self.project_path)

    @property
    def project_name(self) -> Optional[str]:
        """File stem of the project path, e.g. 'MyGame' for 'C:/proj/MyGame.fspro'."""
        if not self.project_path:
            return None
        if "\\" in self.project_path or ":" in self.project_path[:3]:
            return PureWindowsPath(self.project_path).stem
        return PurePosixPath(self.project_path).stem

    def with_state(self, state: ConnectionState, **changes) -> "ConnectionStatus":
        return replace(self, state=state, **changes)


class ConnectionModel:
    """
    Observable model for connection state management.

    Observers are called with the new ConnectionStatus every time the
    status is assigned. The model makes no assumption about the calling
    thread; marshalling onto a UI thread is the observer's job.

    Example:
        >>> model = ConnectionModel()
        >>> model.add_observer(lambda status: print(status.state.value))
        >>> model.status = ConnectionStatus(state=ConnectionState.CONNECTING)
        connecting
    """

    def __init__(self):
        """Initialize the connection model with disconnected state."""
        self._status = ConnectionStatus(state=ConnectionState.DISCONNECTED)
        self._observers: List[Callable[[ConnectionStatus], None]] = []

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @status.setter
    def status(self, new_status: ConnectionStatus) -> None:
        self._status = new_status
        self._notify()

    @property
    def state(self) -> ConnectionState:
        return self._status.state

    def add_observer(self, callback: Callable[[ConnectionStatus], None]) -> None:
        """Register a callback to be notified of status changes."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ConnectionStatus], None]) -> None:
        """Unregister a callback. No-op if it was never registered."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self) -> None:
        """
        Notify all registered observers of the current status.

        An observer that raises is logged and skipped; the status has
        already been stored and the remaining observers still run.
        """
        for observer in list(self._observers):
            try:
                observer(self._status)
            except Exception:
                logger.exception(f"Connection observer {observer!r} raised")
