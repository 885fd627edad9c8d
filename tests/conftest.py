"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import RequestProcessor, ServerConfig, WebServer


# Bytes that are not valid UTF-8 and include CR/LF, so any re-encoding
# or newline translation would show up in comparisons
JPEG_BYTES = bytes(range(256)) * 40 + b"\xff\xd9\r\n\x00"
PDF_BYTES = b"%PDF-1.4\n" + b"\x00\x01binary\r\n" * 500 + b"%%EOF\n"


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """A document root with a few files of different types."""
    (tmp_path / "image.jpg").write_bytes(JPEG_BYTES)
    (tmp_path / "photo.JPG").write_bytes(b"upper-case extension")
    (tmp_path / "report.pdf").write_bytes(PDF_BYTES)
    (tmp_path / "README").write_bytes(b"<h1>No extension</h1>\n")
    (tmp_path / "README.txt").write_bytes(b"plain text readme\n")
    (tmp_path / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
    (tmp_path / "archive.tar.gz").write_bytes(b"\x1f\x8b\x08\x00")
    (tmp_path / "empty.txt").write_bytes(b"")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "page.jpeg").write_bytes(b"nested jpeg")
    return tmp_path


@pytest.fixture
def config(document_root: Path) -> ServerConfig:
    """Test configuration serving the document_root fixture."""
    return ServerConfig(
        host="127.0.0.1",
        port=8080,
        document_root=str(document_root),
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def processor(config: ServerConfig) -> RequestProcessor:
    return RequestProcessor(config)


class BrokenStream:
    """A stream that accepts `fail_after` writes and then raises BrokenPipeError."""

    def __init__(self, fail_after: int = 0):
        self.fail_after = fail_after
        self.writes = []

    def write(self, data: bytes):
        if len(self.writes) >= self.fail_after:
            raise BrokenPipeError(32, "Broken pipe")
        self.writes.append(data)
        return len(data)


@pytest.fixture
def broken_stream_factory():
    return BrokenStream


def split_response(raw: bytes):
    """Split a raw response into (status line, headers dict, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


class TestServer:
    """Runs a WebServer in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.port

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.ready.wait(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(document_root: Path) -> Generator[TestServer, None, None]:
    """A running server on a free port, serving document_root."""
    server = WebServer(ServerConfig(
        host="127.0.0.1",
        port=0,
        document_root=str(document_root),
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
