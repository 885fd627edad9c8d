"""
Request-scoped errors.

Every error here ends the current request and nothing else. The server
writes the matching error page (when the client can still be written to),
logs the failure and moves on to the next connection.

    RequestError
    ├── MalformedRequest      400  request line has fewer than 3 fields
    ├── UnsupportedMethod     501  method is not GET
    ├── UnsupportedProtocol   400  version is not HTTP/1.0 or HTTP/1.1
    ├── ResourceNotFound      404  requested file could not be opened
    └── ClientWriteFailure    -    the client went away mid-response
"""

from typing import Optional

from .http.status_codes import HTTPStatus


class RequestError(Exception):
    """
    Base class for errors that abort a single request.

    Attributes:
        status: Status code of the response sent for this error, or None
                when no response can be sent.
    """

    status: Optional[HTTPStatus] = None


class MalformedRequest(RequestError):
    """The request line could not be split into method, path and version."""

    status = HTTPStatus.BAD_REQUEST


class UnsupportedMethod(RequestError):
    """The request used a method other than GET."""

    status = HTTPStatus.NOT_IMPLEMENTED

    def __init__(self, method: str):
        super().__init__(f"Method not implemented: {method}")
        self.method = method


class UnsupportedProtocol(RequestError):
    """The request asked for a protocol other than HTTP/1.0 or HTTP/1.1."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, version: str):
        super().__init__(f"Unsupported protocol: {version}")
        self.version = version


class ResourceNotFound(RequestError):
    """
    The requested file could not be opened.

    Missing files, permission errors, directories and paths outside the
    document root all end up here.
    """

    status = HTTPStatus.NOT_FOUND

    def __init__(self, path: str, reason: str = ""):
        message = f"Not found: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class ClientWriteFailure(RequestError):
    """Writing to the client failed (connection reset, broken pipe, ...)."""
