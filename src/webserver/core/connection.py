"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket: a bounded read of the request, writes
of the response, and a clean close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:                     Server might receive:
        "GET /image.jpg HTTP/1.1\r\n"     recv() → "GET /ima"
        "Host: localhost\r\n"             recv() → "ge.jpg HTTP/1.1\r\nHo"
        "\r\n"                            recv() → "st: localhost\r\n\r\n"

So the request is read in a loop until one of these happens:

    1. The blank line ending the headers arrives (\r\n\r\n or \n\n)
    2. max_request_size bytes have been read
    3. The client closes its side (recv() returns b"")
    4. The read times out after some data arrived

=============================================================================
BOUNDED READS
=============================================================================

Only the request line matters to this server, so the read is capped at
max_request_size bytes (1 KB by default). Anything beyond the cap is
left unread and the result is marked as truncated:

    RawRequest(data=b"GET /x HTTP/1.1\r\nCookie: ...", truncated=True)

Whether a truncated request is parsed anyway or rejected with 400 is the
processor's decision (ServerConfig.reject_oversized).

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     └─────────────┴───────────────────────────────┘

There is no keep-alive: every connection carries one request.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)

HEADER_TERMINATORS = (b"\r\n\r\n", b"\n\n")


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass(frozen=True)
class RawRequest:
    """
    Request bytes read from a client.

    Attributes:
        data: At most max_request_size bytes.
        truncated: True if the client sent more than could be read.
    """

    data: bytes
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        bytes_written: Bytes sent to the client so far.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    bytes_written: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_request_size: int = 1024

    # Bounds on draining the client after the response
    DRAIN_TIMEOUT = 0.5
    DRAIN_LIMIT = 64 * 1024

    def __post_init__(self):
        # Accepted sockets may inherit the listener's timeout; set our own
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> RawRequest:
        """
        Read the request, up to max_request_size bytes.

        Returns:
            RawRequest holding what was read. data is empty if the client
            closed the connection without sending anything.

        Raises:
            TimeoutError: Nothing arrived before the timeout.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            while not _has_header_end(buffer):
                remaining = self.max_request_size - len(buffer)
                if remaining <= 0:
                    break
                chunk = self._recv(min(self.buffer_size, remaining))
                if not chunk:
                    break  # Client closed its side
                buffer += chunk
        except socket.timeout:
            if not buffer:
                raise TimeoutError("Request read timeout")
            logger.debug(f"[{self.id}] Read timed out, using {len(buffer)} bytes received")

        truncated = len(buffer) >= self.max_request_size and not _has_header_end(buffer)
        if truncated:
            truncated = self._has_pending_data()

        return RawRequest(data=buffer, truncated=truncated)

    def _recv(self, size: int) -> bytes:
        """
        Receive data from the socket.

        Returns:
            Received bytes, or b"" if the client disconnected.
        """
        try:
            return self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _has_pending_data(self) -> bool:
        """Check, without consuming it, whether the client sent more data."""
        try:
            self.socket.settimeout(0)
            return bool(self.socket.recv(1, socket.MSG_PEEK))
        except OSError:
            # BlockingIOError: nothing waiting
            return False
        finally:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes) -> int:
        """
        Send all of `data` to the client.

        Uses sendall(), which loops until every byte is handed to the
        kernel. Errors (BrokenPipeError, ConnectionResetError, ...) are
        left to the caller.

        Returns:
            Number of bytes sent.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_written += len(data)
        return len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        2. Drain whatever the client still sends (unread headers), so
           the kernel does not answer with RST and destroy the response.
           At most DRAIN_LIMIT bytes within DRAIN_TIMEOUT seconds in total.
        3. close() releases the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.bytes_written} bytes")

    def _drain(self):
        deadline = time.monotonic() + self.DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < self.DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except (socket.timeout, OSError):
            pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions


def _has_header_end(buffer: bytes) -> bool:
    return any(terminator in buffer for terminator in HEADER_TERMINATORS)
