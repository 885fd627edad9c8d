"""
=============================================================================
HTTP REQUEST LINE PARSER
=============================================================================

Parses and validates the first line of an HTTP/1.x request.

=============================================================================
WHAT WE LOOK AT
=============================================================================

Only the request line is interpreted. Headers and any body that follow
it are read off the socket but otherwise ignored.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /image.jpg HTTP/1.1\r\n        ← request line (parsed)        │
    │    ─┬─ ─────┬──── ────┬───                                           │
    │     │       │         │                                              │
    │   Method   Path    Version                                           │
    │                                                                      │
    │    Host: localhost:8080\r\n           ← headers (ignored)            │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
VALIDATION ORDER
=============================================================================

    1. Field count   fewer than 3 tokens        → MalformedRequest    (400)
    2. Method        not exactly "GET"          → UnsupportedMethod   (501)
    3. Protocol      not HTTP/1.0 or HTTP/1.1   → UnsupportedProtocol (400)
                     (case-insensitive)

The order matters when a request fails more than one check:
"POST / HTTP/2.0" is answered with 501, not 400.

Tokens are split on runs of ASCII whitespace (space, tab, CR, LF, VT,
FF), so "GET   /  HTTP/1.0" is accepted. Other characters, including
non-ASCII spaces, stay inside their token. Tokens after the third are
ignored.

=============================================================================
"""

from dataclasses import dataclass

from ..errors import MalformedRequest, UnsupportedMethod, UnsupportedProtocol


@dataclass(frozen=True)
class RequestLine:
    """
    A validated request line.

    Attributes:
        method: Always "GET" once validated.
        path: Request target exactly as sent, e.g. "/image.jpg".
        version: Protocol version as sent, e.g. "HTTP/1.1" or "http/1.0".
    """

    method: str
    path: str
    version: str

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.version}"


class RequestParser:
    """
    Splits a raw request buffer into a RequestLine and checks it.

    Stateless; a single parser can be shared by every request.
    """

    SUPPORTED_METHOD = "GET"
    SUPPORTED_VERSIONS = frozenset({"HTTP/1.0", "HTTP/1.1"})

    def parse(self, data: bytes) -> RequestLine:
        """
        Parse and validate the request line.

        Args:
            data: Raw bytes read from the client (possibly truncated).

        Returns:
            The validated RequestLine.

        Raises:
            MalformedRequest: Fewer than three fields.
            UnsupportedMethod: Method other than GET.
            UnsupportedProtocol: Version other than HTTP/1.0 or HTTP/1.1.
        """
        # Split before decoding: only ASCII whitespace separates fields
        tokens = [
            token.decode("utf-8", errors="replace")
            for token in self._raw_first_line(data).split()
        ]
        if len(tokens) < 3:
            raise MalformedRequest(f"Expected 3 fields in request line, got {len(tokens)}")

        method, path, version = tokens[:3]

        # Case-sensitive: "get" is not GET
        if method != self.SUPPORTED_METHOD:
            raise UnsupportedMethod(method)

        if version.upper() not in self.SUPPORTED_VERSIONS:
            raise UnsupportedProtocol(version)

        return RequestLine(method=method, path=path, version=version)

    @staticmethod
    def first_line(data: bytes) -> str:
        """
        Extract the first line of the request as text.

        The line ends at the first LF; a CR before it is dropped. A buffer
        without any LF (truncated or sent by a sloppy client) is used
        whole. Bytes are decoded as UTF-8, with undecodable bytes
        replaced, so methods and paths in valid UTF-8 come back unchanged.
        """
        return RequestParser._raw_first_line(data).decode("utf-8", errors="replace")

    @staticmethod
    def _raw_first_line(data: bytes) -> bytes:
        line = data.split(b"\n", 1)[0]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line


def parse_request_line(data: bytes) -> RequestLine:
    """
    Convenience function to parse a request line.

    Example:
        request = parse_request_line(b"GET / HTTP/1.1\\r\\n\\r\\n")
    """
    return RequestParser().parse(data)
