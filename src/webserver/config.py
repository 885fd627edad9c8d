"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── webserver 3000 --root ./public                             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBSERVER_ROOT=./public webserver 3000                     │
    │                                                                      │
    │   3. Defaults (this file)                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The configuration is built once at startup and never mutated while the
server is running. The request pipeline only reads from it.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


LOG_FORMATS = ("text", "json")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, timeout

    REQUESTS
    - max_request_size, reject_oversized

    FILES
    - document_root, chunk_size, escape_reflected

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind to. Defaults to all interfaces."""

    port: int = 8080
    """
    Port to listen on. 0 asks the OS for a free port; the landing page
    then links to whichever port was actually bound.
    """

    backlog: int = 5
    """Maximum number of connections waiting to be accepted."""

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds for reading the request. None = wait forever."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 1024
    """
    Maximum number of request bytes read from a client. Only the request
    line is interpreted, so this only needs to be large enough for it.
    """

    reject_oversized: bool = False
    """
    What to do with a request larger than max_request_size.
    False = truncate it and parse what was read.
    True = answer 400 Bad Request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILE SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """Directory files are served from. Defaults to the working directory."""

    chunk_size: int = 8192
    """Bytes read from a file per write to the client."""

    escape_reflected: bool = False
    """HTML-escape the path/method echoed in 404 and 501 pages."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "PyWebServer/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

            WEBSERVER_HOST              Bind address
            WEBSERVER_PORT              Listening port
            WEBSERVER_BACKLOG           Listen backlog
            WEBSERVER_TIMEOUT           Read timeout in seconds
            WEBSERVER_ROOT              Document root
            WEBSERVER_MAX_REQUEST_SIZE  Request read limit in bytes
            WEBSERVER_REJECT_OVERSIZED  1/true/yes to reject oversized requests
            WEBSERVER_CHUNK_SIZE        File transfer chunk size
            WEBSERVER_ESCAPE_REFLECTED  1/true/yes to escape reflected values
            WEBSERVER_LOG_LEVEL         Logging level
            WEBSERVER_LOG_FORMAT        text or json

        Unset variables keep their defaults.

        =====================================================================
        """
        defaults = cls()
        return cls(
            host=os.getenv("WEBSERVER_HOST", defaults.host),
            port=int(os.getenv("WEBSERVER_PORT", str(defaults.port))),
            backlog=int(os.getenv("WEBSERVER_BACKLOG", str(defaults.backlog))),
            timeout=float(os.getenv("WEBSERVER_TIMEOUT", str(defaults.timeout))),
            document_root=os.getenv("WEBSERVER_ROOT", defaults.document_root),
            max_request_size=int(
                os.getenv("WEBSERVER_MAX_REQUEST_SIZE", str(defaults.max_request_size))
            ),
            reject_oversized=_env_bool("WEBSERVER_REJECT_OVERSIZED", defaults.reject_oversized),
            chunk_size=int(os.getenv("WEBSERVER_CHUNK_SIZE", str(defaults.chunk_size))),
            escape_reflected=_env_bool("WEBSERVER_ESCAPE_REFLECTED", defaults.escape_reflected),
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("WEBSERVER_LOG_FORMAT", defaults.log_format),
        )

    def with_overrides(self, **overrides) -> "ServerConfig":
        """
        Return a copy with the given fields replaced.

        None values are skipped, so unset CLI options fall through to
        whatever this config already holds.
        """
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately instead of on
        the first request.

        Raises:
            ValueError: Describing the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if not Path(self.document_root).is_dir():
            raise ValueError(f"Document root is not a directory: {self.document_root}")
