"""
=============================================================================
REQUEST PROCESSOR
=============================================================================

The request pipeline: raw request bytes in, exactly one response out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        process(raw, stream)                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   raw bytes                                                          │
    │      │                                                               │
    │      ▼                                                               │
    │   RequestParser.parse()                                              │
    │      │                                                               │
    │      ├── MalformedRequest     → 400 page ─────────┐                  │
    │      ├── UnsupportedMethod    → 501 page ─────────┤                  │
    │      ├── UnsupportedProtocol  → 400 page ─────────┤                  │
    │      ▼                                            │                  │
    │   FileHandler.serve(path)                         │                  │
    │      │                                            │                  │
    │      ├── "/"                  → landing page ─────┤                  │
    │      ├── ResourceNotFound     → 404 page ─────────┤                  │
    │      └── file                 → 200 + bytes ──────┤                  │
    │                                                   ▼                  │
    │                                             RequestOutcome           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Request-scoped errors never escape process(). Each one is answered with
its error page and reported in the returned RequestOutcome. A client
that disconnects mid-response (ClientWriteFailure) simply ends the
request.

The processor keeps no state between calls; the server creates one and
reuses it for every connection.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import ServerConfig
from .errors import (
    ClientWriteFailure,
    MalformedRequest,
    RequestError,
    ResourceNotFound,
    UnsupportedMethod,
    UnsupportedProtocol,
)
from .handlers import FileHandler
from .http.request import RequestLine, RequestParser
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus
from .http.templates import ResponseTemplates
from .http.writer import ResponseWriter, WritableStream


logger = logging.getLogger(__name__)


@dataclass
class RequestOutcome:
    """
    What happened to a request.

    Attributes:
        status: Status code sent (or being sent) to the client. None if
                the client went away before a status could be chosen.
        bytes_sent: Bytes actually written to the client.
        first_line: The request line as received, for logging.
        request: The validated request line, if parsing succeeded.
        error: The request-scoped error that ended the request, if any.
    """

    status: Optional[HTTPStatus]
    bytes_sent: int = 0
    first_line: str = ""
    request: Optional[RequestLine] = None
    error: Optional[RequestError] = None

    @property
    def success(self) -> bool:
        return self.error is None


class RequestProcessor:
    """
    Turns one raw request into one response.

    Args:
        config: Server configuration (read only).
        port: Port shown in the landing page links. Defaults to
              config.port; pass the bound port when config.port is 0.
    """

    def __init__(self, config: Optional[ServerConfig] = None, port: Optional[int] = None):
        self.config = config or ServerConfig()
        self.port = self.config.port if port is None else port
        self.parser = RequestParser()
        self.templates = ResponseTemplates(escape_reflected=self.config.escape_reflected)
        self.files = FileHandler(
            document_root=self.config.document_root,
            port=self.port,
            templates=self.templates,
            chunk_size=self.config.chunk_size,
        )

    def process(self, raw: bytes, stream: WritableStream, truncated: bool = False) -> RequestOutcome:
        """
        Handle one request.

        Args:
            raw: Request bytes read from the client.
            stream: Where the response is written.
            truncated: The client sent more than max_request_size bytes.

        Returns:
            RequestOutcome describing the response.
        """
        writer = ResponseWriter(stream, self.config.server_name)
        first_line = RequestParser.first_line(raw)

        # ─────────────────────────────────────────────────────────────────
        # PARSE AND VALIDATE
        # ─────────────────────────────────────────────────────────────────
        try:
            if truncated and self.config.reject_oversized:
                raise MalformedRequest(
                    f"Request exceeds {self.config.max_request_size} bytes"
                )
            request = self.parser.parse(raw)
        except UnsupportedMethod as e:
            return self._reject(writer, e, self.templates.bad_method(e.method), first_line)
        except (MalformedRequest, UnsupportedProtocol) as e:
            return self._reject(writer, e, self.templates.bad_request(), first_line)

        # ─────────────────────────────────────────────────────────────────
        # SERVE
        # ─────────────────────────────────────────────────────────────────
        try:
            status = self.files.serve(request.path, writer)
        except ResourceNotFound as e:
            return RequestOutcome(e.status, writer.bytes_sent, first_line, request, e)
        except ClientWriteFailure as e:
            logger.warning(f"Aborted response for {request}: {e}")
            return RequestOutcome(None, writer.bytes_sent, first_line, request, e)

        return RequestOutcome(status, writer.bytes_sent, first_line, request)

    def _reject(
        self,
        writer: ResponseWriter,
        error: RequestError,
        response: HTTPResponse,
        first_line: str,
    ) -> RequestOutcome:
        """Write the error page for a request that failed validation."""
        logger.info(f"Rejected request {first_line!r}: {error}")
        try:
            writer.send(response)
        except ClientWriteFailure:
            # Nothing more to do; the original error is what gets reported
            pass
        return RequestOutcome(error.status, writer.bytes_sent, first_line, None, error)
