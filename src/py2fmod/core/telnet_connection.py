"""
Console connection for FMOD Studio's scripting console.

This module owns the single TCP stream to the console. It handles the
connection lifecycle, the one-shot telnet handshake, timeout-bounded reads
and paced batch writes.

Any transport fault tears the whole connection down: the console has no
framing beyond newlines and no per-command acknowledgement, so a half-broken
stream cannot be resynchronised. A disposed instance is never reconnected;
callers create a new one.
"""

import errno
import logging
import os
import select
import socket
import threading
import time
from typing import Iterable, Optional, Tuple

from py2fmod.core.errors import (
    ConsoleConnectionError,
    ConsoleReadError,
    ConsoleTimeoutError,
    ConsoleWriteError,
    ErrorCodes,
    ImporterError,
)
from py2fmod.core.telnet_protocol import (
    COMMAND_DELAY,
    CONNECT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    NEGOTIATION,
    READ_CHUNK_SIZE,
    READ_POLL_INTERVAL,
    encode_line,
    make_decoder,
    strip_negotiation,
)

# connect_ex results that mean "still connecting" on a non-blocking socket
_CONNECT_IN_PROGRESS = {
    0,
    errno.EINPROGRESS,
    errno.EALREADY,
    errno.EWOULDBLOCK,
    getattr(errno, 'WSAEWOULDBLOCK', 10035),
}

_CONNECT_POLL_SLICE = 0.05


class ConsoleConnection:
    """
    Manages the TCP stream to the FMOD Studio console.

    The instance starts unconnected. ``connect()`` either makes it live or
    leaves it released; any I/O error or ``dispose()`` moves it to the
    disposed state for good.

    The socket is owned exclusively by this object. The class is not meant to
    be driven by several operations at once; the only cross-thread call it
    supports is ``dispose()``, which cancels whatever is in flight.

    Example:
        >>> with ConsoleConnection("127.0.0.1", 3663) as console:
        ...     if console.connect():
        ...         console.write_single("studio.project.filePath")
        ...         reply = console.read_response(timeout=10.0)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        connect_timeout: float = CONNECT_TIMEOUT,
        command_delay: float = COMMAND_DELAY
    ):
        """
        Initialize an unconnected console connection.

        Args:
            host: Console host name or address
            port: Console port (FMOD Studio default: 3663)
            connect_timeout: Upper bound for the connect attempt in seconds
            command_delay: Pause after each command of a batch in seconds
        """
        self._host = host
        self._port = port
        self.connect_timeout = connect_timeout
        self.command_delay = command_delay

        self._socket: Optional[socket.socket] = None
        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self._connected = False
        self._disposed = False

        self.last_error: Optional[ImporterError] = None
        self.logger = logging.getLogger(__name__)

    # ========== State ==========

    @property
    def is_connected(self) -> bool:
        """True while the stream is live."""
        with self._lock:
            return self._connected and self._socket is not None

    @property
    def is_disposed(self) -> bool:
        with self._lock:
            return self._disposed

    @property
    def endpoint(self) -> Tuple[str, int]:
        """(host, port) this connection targets."""
        return self._host, self._port

    # ========== Lifecycle ==========

    def connect(self, host: Optional[str] = None, port: Optional[int] = None) -> bool:
        """
        Open the stream and perform the telnet handshake.

        Transport problems are reported through the return value and
        ``last_error``; they are never raised.

        Args:
            host: Optional host overriding the constructor value
            port: Optional port overriding the constructor value

        Returns:
            True if the connection is live, False otherwise
        """
        if self.is_connected:
            return True

        if self.is_disposed:
            self.logger.error(
                f"Cannot connect to {self._host}:{self._port}: connection instance was already disposed."
            )
            self.last_error = ConsoleConnectionError(
                "Connection instance was disposed",
                endpoint=self.endpoint,
                error_code=ErrorCodes.STATE_ERROR
            )
            return False

        if host is not None:
            self._host = host
        if port is not None:
            self._port = port

        self.last_error = None
        self.logger.info(f"Connecting to FMOD Studio console at {self._host}:{self._port}")

        try:
            sock = self._open_socket()
            sock.sendall(NEGOTIATION)
        except ImporterError as e:
            self.logger.error(f"Console connection to {self._host}:{self._port} failed: {e.message}")
            self.last_error = e
            self.dispose()
            return False
        except (OSError, ValueError) as e:
            if self._cancel.is_set():
                self.last_error = self._cancelled_error("Connection attempt cancelled")
                self.logger.warning(f"Connection attempt to {self._host}:{self._port} was cancelled")
            else:
                self.logger.error(f"Socket error during connection to {self._host}:{self._port}: {e}")
                self.last_error = ConsoleConnectionError(
                    f"Socket error during connection: {e}",
                    endpoint=self.endpoint,
                    error_code=ErrorCodes.SOCKET_ERROR,
                    cause=e
                )
            self.dispose()
            return False

        with self._lock:
            if self._socket is not sock:
                # Disposed while the handshake was in flight
                self.last_error = self._cancelled_error("Connection attempt cancelled")
                return False
            self._connected = True

        self.logger.info(f"Console connection successful to {self._host}:{self._port}.")
        return True

    def _open_socket(self) -> socket.socket:
        """
        Connect a socket within ``connect_timeout``.

        Uses a non-blocking connect polled in short slices so a concurrent
        ``dispose()`` aborts the attempt promptly.
        """
        family, socktype, proto, _, sockaddr = socket.getaddrinfo(
            self._host, self._port, type=socket.SOCK_STREAM
        )[0]

        sock = socket.socket(family, socktype, proto)
        with self._lock:
            if self._cancel.is_set():
                sock.close()
                raise self._cancelled_error("Connection attempt cancelled")
            self._socket = sock

        sock.setblocking(False)
        result = sock.connect_ex(sockaddr)
        if result not in _CONNECT_IN_PROGRESS:
            raise OSError(result, os.strerror(result))

        deadline = time.monotonic() + self.connect_timeout
        while True:
            if self._cancel.is_set():
                raise self._cancelled_error("Connection attempt cancelled")

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ConsoleTimeoutError(
                    f"Connection attempt timed out after {self.connect_timeout} s",
                    timeout_seconds=self.connect_timeout,
                    error_code=ErrorCodes.CONNECTION_TIMEOUT
                )

            _, writable, errored = select.select(
                [], [sock], [sock], min(remaining, _CONNECT_POLL_SLICE)
            )
            if writable or errored:
                break

        error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if error:
            raise OSError(error, os.strerror(error))

        # Blocking sends from here on, bounded so a stalled console cannot hang a batch
        sock.setblocking(True)
        sock.settimeout(self.connect_timeout)
        return sock

    def dispose(self) -> None:
        """
        Close the stream and cancel any in-flight operation.

        Idempotent and safe to call from another thread.
        """
        with self._lock:
            self._cancel.set()
            sock, self._socket = self._socket, None
            was_connected = self._connected
            self._connected = False
            self._disposed = True

        if sock is None:
            return

        try:
            if was_connected:
                sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            self.logger.debug(f"Socket shutdown reported: {e}")

        try:
            sock.close()
        except OSError as e:
            self.logger.error(f"Error closing console socket: {e}")

        self.logger.info("Disposed console connection.")

    def __enter__(self) -> "ConsoleConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ========== I/O ==========

    def read_response(self, timeout: float) -> str:
        """
        Read whatever reply the console produces.

        Accumulates bytes until at least one read has completed and nothing
        more is currently available. A remote close ends the read with the
        text collected so far. The whole read is bounded by ``timeout``,
        including a reply that keeps streaming.

        Args:
            timeout: Upper bound on the read in seconds

        Returns:
            Reply text ("" when not connected)

        Raises:
            ConsoleTimeoutError: No complete reply within ``timeout``
            ConsoleReadError: I/O fault (the connection is disposed)
        """
        if not self.is_connected:
            self.logger.error("Cannot read from console: not connected.")
            return ""

        decoder = make_decoder()
        chunks = []
        has_read = False
        deadline = time.monotonic() + timeout

        while True:
            if self._cancel.is_set():
                raise ConsoleReadError(
                    "Read cancelled: connection was disposed",
                    endpoint=self.endpoint,
                    error_code=ErrorCodes.CONNECTION_CANCELLED
                )

            sock = self._socket
            if sock is None:
                raise ConsoleReadError(
                    "Connection closed during read",
                    endpoint=self.endpoint,
                    error_code=ErrorCodes.CONNECTION_LOST
                )

            if time.monotonic() >= deadline:
                self.logger.warning(f"Console read timed out after {timeout} s.")
                raise ConsoleTimeoutError(
                    f"Read operation timed out after {timeout} s",
                    timeout_seconds=timeout,
                    error_code=ErrorCodes.RESPONSE_TIMEOUT
                )

            try:
                readable, _, _ = select.select([sock], [], [], 0)
                if readable:
                    data = sock.recv(READ_CHUNK_SIZE)
                    if not data:
                        self.logger.info("Console connection closed by remote host during read.")
                        self.dispose()
                        chunks.append(decoder.decode(b"", final=True))
                        return "".join(chunks)

                    chunks.append(decoder.decode(strip_negotiation(data)))
                    has_read = True
                    continue
            except (OSError, ValueError) as e:
                self.logger.error(f"I/O error during console read: {e}")
                self.dispose()
                raise ConsoleReadError(
                    f"Console read failed: {e}",
                    endpoint=self.endpoint,
                    error_code=ErrorCodes.READ_FAILED,
                    cause=e
                ) from e

            if has_read:
                break

            self._cancel.wait(READ_POLL_INTERVAL)

        chunks.append(decoder.decode(b"", final=True))
        return "".join(chunks)

    def write_batch(self, lines: Iterable[str]) -> None:
        """
        Send commands in order, one write per entry.

        Blank entries are skipped. Each entry is terminated with a newline
        and followed by ``command_delay`` so the console keeps up. Multi-line
        entries go out as a single write.

        Args:
            lines: Ordered command texts

        Raises:
            ConsoleWriteError: I/O fault or cancellation (the connection is disposed)
        """
        entries = [line for line in lines if line and line.strip()]

        if not self.is_connected:
            self.logger.error(
                f"Cannot write to console: not connected. Refusing batch of {len(entries)} commands."
            )
            return

        total = len(entries)
        for index, line in enumerate(entries, 1):
            self._send(line)
            self.logger.debug(f"Sent console command {index}/{total}: {line}")

            if self._cancel.wait(self.command_delay):
                self.dispose()
                raise ConsoleWriteError(
                    f"Batch write cancelled after {index}/{total} commands",
                    endpoint=self.endpoint,
                    error_code=ErrorCodes.CONNECTION_CANCELLED
                )

        self.logger.info(f"Finished sending {total} commands batch.")

    def write_single(self, line: str) -> None:
        """
        Send one command without pacing.

        Raises:
            ConsoleWriteError: I/O fault (the connection is disposed)
        """
        if not self.is_connected:
            self.logger.error("Cannot write to console (single line): not connected.")
            return

        if not line or not line.strip():
            return

        self._send(line)
        self.logger.info(f"Sent console command (single): {line}")

    def _send(self, line: str) -> None:
        sock = self._socket
        if sock is None:
            self.dispose()
            raise ConsoleWriteError(
                "Connection closed during write",
                endpoint=self.endpoint,
                error_code=ErrorCodes.CONNECTION_LOST
            )

        try:
            sock.sendall(encode_line(line))
        except (OSError, ValueError) as e:
            self.logger.error(f"I/O error during console write: {e}")
            self.dispose()
            raise ConsoleWriteError(
                f"Console write failed: {e}",
                endpoint=self.endpoint,
                error_code=ErrorCodes.WRITE_FAILED,
                cause=e
            ) from e

    def _cancelled_error(self, message: str) -> ConsoleConnectionError:
        return ConsoleConnectionError(
            message,
            endpoint=self.endpoint,
            error_code=ErrorCodes.CONNECTION_CANCELLED
        )

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else ("disposed" if self.is_disposed else "unconnected")
        return f"ConsoleConnection({self._host}:{self._port}, {state})"
