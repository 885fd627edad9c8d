"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the HTTP/1.1 responses written back to clients.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 404 Not Found\r\n            ← status line               │
    │    Content-type: text/html\r\n           ← headers                   │
    │    Content-Length: 312\r\n                                           │
    │    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n                           │
    │    Server: PyWebServer/1.0\r\n                                       │
    │    Connection: close\r\n                                             │
    │    \r\n                                  ← blank line                │
    │    <!DOCTYPE html> ...                   ← body                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Static files are not loaded into memory. For those the server writes
only the head (head_bytes()) and then streams the file after it, so a
response can be serialized in two parts:

    head_bytes()  →  status line + headers + blank line
    body          →  written separately by the caller

=============================================================================
BUILDER PATTERN
=============================================================================

Instead of filling in format strings that already contain a status line,
responses are assembled from parts:

    ResponseBuilder()
        .status(HTTPStatus.NOT_FOUND)
        .html(page)
        .close_connection()
        .build()

The status line and headers are always produced by the builder, so values
taken from the request can only ever land in the body.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "PyWebServer/1.0"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    A plain data container. Use ResponseBuilder (or the templates in
    webserver.http.templates) to construct one.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 501 Method Not Implemented"
        """
        return f"{self.version} {self.status} {self.status.phrase}"

    @property
    def content_type(self) -> Optional[str]:
        """The Content-type header, if set."""
        return self.headers.get("Content-type")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header.

        Returns self for method chaining.
        """
        self.headers[name] = value
        return self

    def head_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the status line and headers, ending with the blank line.

        Content-Length is taken from the body unless already set. This
        lets a caller announce the size of a body it is going to stream
        itself after the head.

        Args:
            server_name: Value for the Server header.

        Returns:
            Response head as bytes, CRLF terminated.
        """
        # Copy headers to avoid modifying the original
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n"

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the complete response (head and body).

        Returns:
            Complete HTTP response as bytes ready for sendall().
        """
        return self.head_bytes(server_name) + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns self, so calls can be chained; build() returns
    the finished HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("image/jpeg")
            .header("Content-Length", "2048")
            .close_connection()
            .build())
    """

    def __init__(self, server_name: str = DEFAULT_SERVER_NAME):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._server_name = server_name

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        """Add multiple headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """
        Set the Content-type header.

        The header is spelled "Content-type".
        """
        return self.header("Content-type", content_type)

    def close_connection(self) -> "ResponseBuilder":
        """
        Set Connection: close.

        Every response from this server is the last one on its
        connection.
        """
        return self.header("Connection", "close")

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body.

        Strings are encoded as UTF-8.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """Set an HTML body and Content-type: text/html."""
        self._body = html.encode("utf-8")
        return self.content_type("text/html")

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes(self._server_name)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 12:00:00 GMT

    HTTP dates are always in GMT. The names are spelled out here rather
    than taken from strftime, which follows the process locale.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
