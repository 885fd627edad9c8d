"""
=============================================================================
FILE HANDLER
=============================================================================

Resolves a validated request path to a file under the document root and
writes exactly one response for it.

=============================================================================
FLOW
=============================================================================

    serve("/image.jpg")
          │
          ├── path == "/" ? ──────────────► landing page (200, text/html)
          │
          ├── strip one leading "/"  →  "image.jpg"
          │
          ├── open document_root/image.jpg
          │        │
          │        └── failed? ─────────────► 404 page, ResourceNotFound
          │
          ├── classify "image.jpg"  →  image/jpeg
          │
          ├── write 200 head with Content-type
          │
          └── stream the file in chunk_size pieces, then close it

Every way of failing to open the file (missing, unreadable, a directory,
a path that escapes the document root) collapses into the same 404.

=============================================================================
RESOURCE CLEANUP
=============================================================================

The open file lives in a `with` block. If the client disconnects
halfway through, the write raises ClientWriteFailure, the `with` block
closes the file, and the error propagates to the processor.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..errors import ResourceNotFound
from ..http.mime_types import classify
from ..http.status_codes import HTTPStatus
from ..http.templates import ResponseTemplates
from ..http.writer import ResponseWriter


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves the landing page and files below a document root.

    Args:
        document_root: Directory request paths are resolved against.
        port: Listening port, interpolated into the landing page links.
        templates: Response template store.
        chunk_size: How many bytes to read from a file per write.
    """

    def __init__(
        self,
        document_root: Union[str, Path],
        port: int,
        templates: Optional[ResponseTemplates] = None,
        chunk_size: int = 8192,
    ):
        # Resolve once so the containment check compares absolute paths
        self.document_root = Path(document_root).resolve()
        self.port = port
        self.templates = templates or ResponseTemplates()
        self.chunk_size = chunk_size

    def serve(self, path: str, writer: ResponseWriter) -> HTTPStatus:
        """
        Write the response for a validated request path.

        Args:
            path: Request path as sent by the client, e.g. "/image.jpg".
            writer: Where the response goes.

        Returns:
            HTTPStatus.OK once the whole response has been written.

        Raises:
            ResourceNotFound: The file could not be opened. The 404 page
                              has already been written.
            ClientWriteFailure: The client stopped accepting data.
        """
        if path == "/":
            writer.send(self.templates.landing_page(self.port))
            return HTTPStatus.OK

        name = path[1:] if path.startswith("/") else path
        logger.debug(f"Retrieving resource {name}")

        try:
            file = self._open(name)
        except (OSError, ValueError, ResourceNotFound) as e:
            logger.info(f"Could not open {name!r}: {e}")
            writer.send(self.templates.not_found(path))
            raise ResourceNotFound(path, reason=type(e).__name__) from e

        with file:
            size = os.fstat(file.fileno()).st_size
            content_type = classify(name)
            writer.send_head(self.templates.success_header(content_type, size))
            self._stream(file, name, writer)

        return HTTPStatus.OK

    def resolve(self, name: str) -> Path:
        """
        Map a relative name to an absolute path inside the document root.

        Raises:
            ResourceNotFound: The name points outside the document root,
                              e.g. "../etc/passwd".
        """
        full_path = (self.document_root / name).resolve()
        try:
            full_path.relative_to(self.document_root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name}")
            raise ResourceNotFound(name, reason="outside document root")
        return full_path

    def _open(self, name: str) -> BinaryIO:
        return self.resolve(name).open("rb")

    def _stream(self, file: BinaryIO, name: str, writer: ResponseWriter) -> None:
        """Copy the file to the writer chunk by chunk."""
        while True:
            try:
                chunk = file.read(self.chunk_size)
            except OSError as e:
                # Head is already out; all we can do is stop
                logger.error(f"Read error while sending {name}: {e}")
                return
            if not chunk:
                return
            writer.write(chunk)
