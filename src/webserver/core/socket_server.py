"""
=============================================================================
SOCKET SERVER
=============================================================================

The TCP listener: create the socket, bind, listen, and accept
connections one at a time.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Lifecycle                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    open()            socket() → setsockopt() → bind() → listen()    │
    │        │                                                             │
    │        ▼                                                             │
    │    start(handler)    install signal handlers, then accept loop:     │
    │        │                                                             │
    │        └──► while running:                                           │
    │                 accept()             wait for a client (1s timeout)  │
    │                 Connection(...)      wrap the client socket          │
    │                 handler(conn)        handle it, then loop            │
    │                                                                      │
    │    shutdown()        clear the running flag; the loop notices       │
    │                      within one accept timeout                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

open() is separate from start() so the caller can learn the real port
before serving (port 0 lets the OS pick one).

Connections are handled in the accept loop itself, strictly one after
another. The handler must not raise; anything it lets through is logged
and the loop carries on with the next client.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.open()
        print(server.address)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_TIMEOUT = 1.0

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), or the configured one before open()."""
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" when restarting the server
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # accept() wakes up periodically so shutdown() is noticed
        sock.settimeout(self.ACCEPT_TIMEOUT)

        return sock

    def open(self) -> Tuple[str, int]:
        """
        Create the socket, bind and listen.

        Returns:
            The bound (host, port).

        Raises:
            OSError: Binding failed (port in use, permission denied).
        """
        if self._socket is not None:
            return self.address

        sock = self._create_socket()
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        sock.listen(self.config.backlog)
        self._socket = sock
        # From here on a shutdown() stops the loop, even before start() runs
        self._running = True

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        return self.address

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that request a graceful shutdown.

        Python only allows this from the main thread; when the server runs
        in a background thread (tests, embedding) signals are left alone.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown() is called.

        Opens the socket first if open() was not called.

        Args:
            connection_handler: Called with each accepted Connection.
        """
        self.open()
        self._setup_signals()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: gives us a chance to check self._running
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )

            try:
                connection_handler(conn)
            except Exception as e:
                # One bad connection must not take the server down
                logger.exception(f"[{conn.id}] Unhandled error: {e}")
                conn.close()

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from a signal handler or another thread, and more
        than once.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        logger.info("Socket server stopped")

