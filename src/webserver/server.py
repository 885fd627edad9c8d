"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together into a runnable server.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection

    2. READ
       └── Connection.read_request() reads at most max_request_size bytes

    3. PROCESS
       └── RequestProcessor parses the request line and writes the
           landing page, the file, or an error page

    4. LOG
       └── One access log line per connection

    5. CLOSE
       └── Connection closed; back to accepting

One request per connection, one connection at a time.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, SocketServer
from .processor import RequestOutcome, RequestProcessor


logger = logging.getLogger(__name__)


class WebServer:
    """
    Static file web server.

    Usage:
        server = WebServer(ServerConfig(port=8080, document_root="./public"))
        server.run()  # Blocks until Ctrl+C / SIGTERM

    Attributes:
        config: Server configuration.
        processor: The request pipeline. Created once the socket is bound,
                   since the landing page needs the real port.
        ready: Set once the server is accepting connections.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._access_log = AccessLogger(self.config.log_format)
        self.processor: Optional[RequestProcessor] = None
        self.ready = threading.Event()

    @property
    def address(self):
        """The bound (host, port)."""
        return self._socket_server.address

    @property
    def port(self) -> int:
        return self.address[1]

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config.log_level.
                           Pass False when embedding the server in an
                           application that configures logging itself.

        Raises:
            OSError: The listening socket could not be bound.
        """
        if setup_logging:
            self._setup_logging()

        self._socket_server.open()
        self.processor = RequestProcessor(self.config, port=self.port)

        logger.info(
            f"Serving {self.processor.files.document_root} "
            f"on http://{self.address[0]}:{self.port}/"
        )
        self.ready.set()

        try:
            self._socket_server.start(self.handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.ready.clear()
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the accept loop to stop. Returns immediately."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webserver").setLevel(level)

    def handle_connection(self, conn: Connection):
        """
        Read one request from a connection, answer it, and close it.

        Every request-scoped failure is handled inside the processor; a
        read timeout or an unexpected error only ends this connection.
        """
        start = time.perf_counter()

        with conn:
            try:
                raw = conn.read_request()
            except TimeoutError:
                logger.info(f"[{conn.id}] {conn.client_ip} sent nothing before timeout")
                return

            logger.debug(f"[{conn.id}] Here is the message: {raw.data!r}")
            if raw.truncated:
                logger.debug(f"[{conn.id}] Request truncated to {len(raw)} bytes")

            outcome = self.processor.process(raw.data, conn, truncated=raw.truncated)

        self._log_access(conn, outcome, start)

    def _log_access(self, conn: Connection, outcome: RequestOutcome, start: float):
        duration_ms = (time.perf_counter() - start) * 1000
        error = type(outcome.error).__name__ if outcome.error else None
        self._access_log.log(
            client_ip=conn.client_ip,
            request_line=outcome.first_line,
            status_code=int(outcome.status) if outcome.status is not None else None,
            bytes_sent=outcome.bytes_sent,
            duration_ms=duration_ms,
            error=error,
        )
        if not outcome.success:
            logger.debug(f"[{conn.id}] Request was not successful: {outcome.error}")
