"""
=============================================================================
WEBSERVER - Minimal HTTP/1.x Static File Server
=============================================================================

Answers GET requests with files from a document root, or with a fixed
landing page for "/". Anything else gets an explicit error page.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webserver PORT)
    ├── server.py            # WebServer: wires everything together
    ├── processor.py         # RequestProcessor: raw request → response
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Request-scoped error taxonomy
    ├── access_log.py        # Access log lines (text / JSON)
    ├── core/                # Networking
    │   ├── socket_server.py # TCP listener and accept loop
    │   └── connection.py    # Bounded request read, writes, close
    ├── http/                # HTTP protocol pieces
    │   ├── request.py       # Request line parsing and validation
    │   ├── response.py      # HTTPResponse and ResponseBuilder
    │   ├── templates.py     # Landing page and error pages
    │   ├── writer.py        # Response writer
    │   ├── status_codes.py  # HTTPStatus enum
    │   └── mime_types.py    # Extension → Content-type
    └── handlers/
        └── files.py         # Path → file → response

=============================================================================
QUICK START
=============================================================================

    from webserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, document_root="."))
    server.run()

Or from a shell:

    python -m webserver 8080

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .processor import RequestOutcome, RequestProcessor
from .server import WebServer

__all__ = ["WebServer", "ServerConfig", "RequestProcessor", "RequestOutcome", "__version__"]
