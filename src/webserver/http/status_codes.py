"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server ever sends.

    ┌───────┬──────────────────────────────┬───────────────────────────────┐
    │ Code  │ Status line                  │ Sent when                     │
    ├───────┼──────────────────────────────┼───────────────────────────────┤
    │ 200   │ HTTP/1.1 200 OK              │ landing page or file found    │
    │ 400   │ HTTP/1.1 400 Bad Request     │ malformed line / bad protocol │
    │ 404   │ HTTP/1.1 404 Not Found       │ file could not be opened      │
    │ 501   │ HTTP/1.1 501 Method Not      │ method is not GET             │
    │       │          Implemented         │                               │
    └───────┴──────────────────────────────┴───────────────────────────────┘

501 is sent as "Method Not Implemented", not the RFC 7231 "Not
Implemented".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum lets a status be compared against plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> str(HTTPStatus.OK)
        '200'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    NOT_IMPLEMENTED = 501

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Method Not Implemented",
}
