"""
Unit tests for the request pipeline.
"""

import io

import pytest

from conftest import JPEG_BYTES, split_response
from webserver import RequestProcessor, ServerConfig
from webserver.errors import (
    ClientWriteFailure,
    MalformedRequest,
    ResourceNotFound,
    UnsupportedMethod,
    UnsupportedProtocol,
)
from webserver.http.status_codes import HTTPStatus


def run(processor: RequestProcessor, raw: bytes, **kwargs):
    stream = io.BytesIO()
    outcome = processor.process(raw, stream, **kwargs)
    return outcome, stream.getvalue()


class TestSuccessfulRequests:
    """Requests that end in 200."""

    def test_landing_page(self, processor):
        outcome, raw = run(processor, b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

        status_line, headers, body = split_response(raw)
        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-type"] == "text/html"
        assert body.decode("utf-8").count("localhost:8080/") == 5
        assert outcome.success
        assert outcome.status == HTTPStatus.OK
        assert outcome.bytes_sent == len(raw)

    def test_file(self, processor):
        outcome, raw = run(processor, b"GET /image.jpg HTTP/1.0\r\n\r\n")

        status_line, headers, body = split_response(raw)
        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-type"] == "image/jpeg"
        assert body == JPEG_BYTES
        assert outcome.request.path == "/image.jpg"
        assert outcome.first_line == "GET /image.jpg HTTP/1.0"

    def test_lower_case_protocol(self, processor):
        outcome, _ = run(processor, b"GET /README.txt http/1.1\r\n\r\n")

        assert outcome.status == HTTPStatus.OK

    def test_explicit_port_overrides_config(self, config):
        processor = RequestProcessor(config, port=31337)
        _, raw = run(processor, b"GET / HTTP/1.1\r\n\r\n")

        assert split_response(raw)[2].decode("utf-8").count("31337") == 5

    @pytest.mark.parametrize("char", ["\xa0", "\x1c", "\u2003"])
    def test_file_name_with_non_ascii_space(self, document_root, processor, char):
        (document_root / f"a{char}b.txt").write_bytes(b"spaced\n")

        outcome, raw = run(processor, f"GET /a{char}b.txt HTTP/1.1\r\n\r\n".encode("utf-8"))

        assert outcome.status == HTTPStatus.OK
        assert split_response(raw)[2] == b"spaced\n"

    def test_processor_is_reusable(self, processor):
        """Repeated calls share no state."""
        bodies = [split_response(run(processor, b"GET /image.jpg HTTP/1.1\r\n\r\n")[1])[2]
                  for _ in range(3)]

        assert bodies == [JPEG_BYTES] * 3


class TestRejectedRequests:
    """Requests that fail validation."""

    @pytest.mark.parametrize("raw", [b"", b"GET\r\n\r\n", b"GET /\r\n\r\n", b"\r\n"])
    def test_malformed(self, processor, raw):
        outcome, response = run(processor, raw)

        assert response.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert isinstance(outcome.error, MalformedRequest)
        assert outcome.status == HTTPStatus.BAD_REQUEST
        assert not outcome.success

    @pytest.mark.parametrize("method", ["POST", "PUT", "get", "OPTIONS", "X-CUSTOM"])
    def test_unsupported_method(self, processor, method):
        outcome, response = run(processor, f"{method} / HTTP/1.1\r\n\r\n".encode())

        status_line, headers, body = split_response(response)
        assert status_line == "HTTP/1.1 501 Method Not Implemented"
        assert headers["Content-type"] == "text/html"
        assert f"<code>{method}</code>".encode() in body
        assert isinstance(outcome.error, UnsupportedMethod)

    @pytest.mark.parametrize("version", ["HTTP/2.0", "HTTP/1.2", "SPDY/3"])
    def test_unsupported_protocol(self, processor, version):
        outcome, response = run(processor, f"GET / {version}\r\n\r\n".encode())

        assert response.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert isinstance(outcome.error, UnsupportedProtocol)

    def test_method_error_wins_over_protocol_error(self, processor):
        _, response = run(processor, b"DELETE / HTTP/9.9\r\n\r\n")

        assert response.startswith(b"HTTP/1.1 501 Method Not Implemented\r\n")

    def test_exactly_one_response(self, processor):
        _, response = run(processor, b"POST / HTTP/2.0\r\n\r\n")

        assert response.count(b"HTTP/1.1 ") == 1

    def test_not_found(self, processor):
        outcome, response = run(processor, b"GET /does-not-exist.html HTTP/1.1\r\n\r\n")

        status_line, _, body = split_response(response)
        assert status_line == "HTTP/1.1 404 Not Found"
        assert b"<code>/does-not-exist.html</code>" in body
        assert isinstance(outcome.error, ResourceNotFound)
        assert outcome.status == HTTPStatus.NOT_FOUND
        assert outcome.request is not None


class TestOversizedRequests:
    """The truncated flag from the connection layer."""

    def test_truncated_request_is_parsed_by_default(self, processor):
        outcome, _ = run(processor, b"GET /README.txt HTTP/1.1\r\nCookie: aaaa", truncated=True)

        assert outcome.status == HTTPStatus.OK

    def test_truncated_request_rejected_when_configured(self, document_root):
        processor = RequestProcessor(ServerConfig(
            document_root=str(document_root),
            reject_oversized=True,
        ))
        outcome, response = run(processor, b"GET /README.txt HTTP/1.1\r\nCookie: aaaa", truncated=True)

        assert response.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert isinstance(outcome.error, MalformedRequest)

    def test_reject_only_applies_to_truncated(self, document_root):
        processor = RequestProcessor(ServerConfig(
            document_root=str(document_root),
            reject_oversized=True,
        ))
        outcome, _ = run(processor, b"GET /README.txt HTTP/1.1\r\n\r\n")

        assert outcome.success


class TestClientWriteFailure:
    """A client that stops reading never crashes the processor."""

    def test_failure_during_file_transfer(self, processor, broken_stream_factory):
        stream = broken_stream_factory(fail_after=1)

        outcome = processor.process(b"GET /image.jpg HTTP/1.1\r\n\r\n", stream)

        assert isinstance(outcome.error, ClientWriteFailure)
        assert outcome.status is None
        assert outcome.bytes_sent == len(stream.writes[0])

    def test_failure_writing_error_page(self, processor, broken_stream_factory):
        outcome = processor.process(b"BREW / HTTP/1.1\r\n\r\n", broken_stream_factory())

        # The validation error is what gets reported
        assert isinstance(outcome.error, UnsupportedMethod)
        assert outcome.bytes_sent == 0

    def test_failure_writing_not_found(self, processor, broken_stream_factory):
        outcome = processor.process(b"GET /missing HTTP/1.1\r\n\r\n", broken_stream_factory())

        assert isinstance(outcome.error, ClientWriteFailure)


class TestEscapeReflected:
    """escape_reflected flows from the config into the error pages."""

    def test_escaped(self, document_root):
        processor = RequestProcessor(ServerConfig(
            document_root=str(document_root),
            escape_reflected=True,
        ))
        _, response = run(processor, b"GET /<i>x</i> HTTP/1.1\r\n\r\n")

        assert b"<i>x</i>" not in response
        assert b"&lt;i&gt;x&lt;/i&gt;" in response

    def test_verbatim_by_default(self, processor):
        _, response = run(processor, b"GET /<i>x</i> HTTP/1.1\r\n\r\n")

        assert b"<code>/<i>x</i></code>" in response
