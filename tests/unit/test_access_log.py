"""
Unit tests for the access log.
"""

import json
import logging

import pytest

from webserver.access_log import AccessLogEntry, AccessLogger


def make_entry(**overrides) -> AccessLogEntry:
    fields = dict(
        client_ip="127.0.0.1",
        request_line="GET /image.jpg HTTP/1.1",
        status_code=200,
        bytes_sent=20514,
        duration_ms=1.8432,
        timestamp="2026-10-19T12:00:00+00:00",
    )
    fields.update(overrides)
    return AccessLogEntry(**fields)


class TestAccessLogEntry:

    def test_to_text(self):
        assert make_entry().to_text() == (
            '127.0.0.1 - - [2026-10-19T12:00:00+00:00] '
            '"GET /image.jpg HTTP/1.1" 200 20514 1.84ms'
        )

    def test_to_text_with_error(self):
        line = make_entry(status_code=404, error="ResourceNotFound").to_text()

        assert line.endswith(" 404 20514 1.84ms error=ResourceNotFound")

    def test_to_text_without_status(self):
        line = make_entry(status_code=None, error="ClientWriteFailure").to_text()

        assert '" - 20514 ' in line

    def test_to_dict_rounds_duration(self):
        data = make_entry().to_dict()

        assert data["duration_ms"] == 1.84
        assert data["status_code"] == 200
        assert data["error"] is None


class TestAccessLogger:

    def test_text_format(self):
        assert AccessLogger("text").format(make_entry()).startswith("127.0.0.1 - - [")

    def test_json_format(self):
        data = json.loads(AccessLogger("json").format(make_entry()))

        assert data["client_ip"] == "127.0.0.1"
        assert data["request_line"] == "GET /image.jpg HTTP/1.1"
        assert data["bytes_sent"] == 20514

    def test_success_logged_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="webserver.access"):
            entry = AccessLogger().log("10.0.0.1", "GET / HTTP/1.1", 200, 512, 0.5)

        (record,) = caplog.records
        assert record.name == "webserver.access"
        assert record.levelno == logging.INFO
        assert record.getMessage() == entry.to_text()

    @pytest.mark.parametrize("status,error", [
        (400, "MalformedRequest"),
        (404, "ResourceNotFound"),
        (501, "UnsupportedMethod"),
        (None, "ClientWriteFailure"),
    ])
    def test_failures_logged_at_warning(self, caplog, status, error):
        with caplog.at_level(logging.INFO, logger="webserver.access"):
            AccessLogger().log("10.0.0.1", "X / HTTP/1.1", status, 0, 0.1, error=error)

        assert caplog.records[0].levelno == logging.WARNING
        assert f"error={error}" in caplog.records[0].getMessage()
