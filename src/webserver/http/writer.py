"""
Response writer.

Wraps whatever the response is written to (a client Connection in the
server, an io.BytesIO in tests) and turns low-level write errors into
ClientWriteFailure.
"""

import logging
from typing import Protocol

from ..errors import ClientWriteFailure
from .response import DEFAULT_SERVER_NAME, HTTPResponse


logger = logging.getLogger(__name__)


class WritableStream(Protocol):
    """Anything with a write(bytes) method."""

    def write(self, data: bytes) -> object:
        ...


class ResponseWriter:
    """
    Writes response bytes to a stream and counts them.

    Attributes:
        stream: Destination for the response.
        server_name: Value of the Server header for serialized responses.
        bytes_sent: Total bytes written so far.
    """

    def __init__(self, stream: WritableStream, server_name: str = DEFAULT_SERVER_NAME):
        self.stream = stream
        self.server_name = server_name
        self.bytes_sent = 0

    def write(self, data: bytes) -> None:
        """
        Write all of `data` to the stream.

        Raises:
            ClientWriteFailure: The stream raised an OSError (broken pipe,
                                connection reset, ...).
        """
        if not data:
            return
        try:
            self.stream.write(data)
        except OSError as e:
            logger.warning(f"Write to client failed after {self.bytes_sent} bytes: {e}")
            raise ClientWriteFailure(str(e)) from e
        self.bytes_sent += len(data)

    def send(self, response: HTTPResponse) -> None:
        """Write a complete response (head and body)."""
        self.write(response.to_bytes(self.server_name))

    def send_head(self, response: HTTPResponse) -> None:
        """Write only the status line and headers of a response."""
        self.write(response.head_bytes(self.server_name))
