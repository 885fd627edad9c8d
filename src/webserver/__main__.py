"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m webserver PORT [options]
    webserver PORT [options]

PORT is required. Without it the server refuses to start and exits with
a usage error (status 2).

Examples:
    webserver 8080                       # Serve the working directory
    webserver 8080 --root ./public       # Serve ./public
    webserver 0                          # Let the OS pick a port
    webserver 8080 --log-level DEBUG     # Log every request in detail

Environment variables (WEBSERVER_ROOT, WEBSERVER_LOG_LEVEL, ...) are read
first; command-line options override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Serve static files over HTTP/1.x, one request per connection.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  webserver 8080                    # Serve the working directory on port 8080
  webserver 8080 --root ./public    # Serve another directory
  webserver 0                       # Let the OS pick a free port
        """
    )

    parser.add_argument(
        "port",
        type=int,
        help="Port to listen on (0 picks a free port)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Seconds to wait for a request before giving up (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST / FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        dest="document_root",
        default=None,
        help="Directory to serve files from (default: working directory)"
    )

    parser.add_argument(
        "--max-request-size",
        type=int,
        default=None,
        help="Maximum request bytes read per connection (default: 1024)"
    )

    parser.add_argument(
        "--reject-oversized",
        action="store_true",
        default=None,
        help="Answer 400 to requests over --max-request-size instead of truncating"
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Bytes per write when sending a file (default: 8192)"
    )

    parser.add_argument(
        "--escape-reflected",
        action="store_true",
        default=None,
        help="HTML-escape the path/method shown on 404 and 501 pages"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then whatever was given on the command line."""
    return ServerConfig.from_env().with_overrides(
        port=args.port,
        host=args.host,
        timeout=args.timeout,
        document_root=args.document_root,
        max_request_size=args.max_request_size,
        reject_oversized=args.reject_oversized,
        chunk_size=args.chunk_size,
        escape_reflected=args.escape_reflected,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = WebServer(config)
    except ValueError as e:
        print(f"ERROR, invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"ERROR, could not start server: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
