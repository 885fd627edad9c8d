"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per handled connection, on the "webserver.access" logger.

    text:  127.0.0.1 - - [2026-10-19T12:00:00+00:00] "GET /image.jpg HTTP/1.1" 200 20514 1.84ms
    json:  {"client_ip": "127.0.0.1", "request_line": "GET /image.jpg HTTP/1.1", ...}

The logger is namespaced so it can be routed on its own:

    logging.getLogger("webserver.access").addHandler(file_handler)

Requests that ended in an error (4xx/5xx, or a client that went away
mid-response) are logged at WARNING, everything else at INFO.

=============================================================================
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional


logger = logging.getLogger("webserver.access")


@dataclass
class AccessLogEntry:
    """Structured access log entry for one request."""

    client_ip: str
    request_line: str
    status_code: Optional[int]
    bytes_sent: int
    duration_ms: float
    timestamp: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON output."""
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format in the style of the Apache common log format."""
        status = self.status_code if self.status_code is not None else "-"
        line = (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {status} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms'
        )
        if self.error:
            line = f"{line} error={self.error}"
        return line


class AccessLogger:
    """
    Writes AccessLogEntry records in text or JSON form.

    Args:
        log_format: "text" or "json".
    """

    def __init__(self, log_format: str = "text"):
        self.log_format = log_format

    def format(self, entry: AccessLogEntry) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(
        self,
        client_ip: str,
        request_line: str,
        status_code: Optional[int],
        bytes_sent: int,
        duration_ms: float,
        error: Optional[str] = None,
    ) -> AccessLogEntry:
        """Build an entry, log it, and return it."""
        entry = AccessLogEntry(
            client_ip=client_ip,
            request_line=request_line,
            status_code=status_code,
            bytes_sent=bytes_sent,
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            error=error,
        )
        failed = error is not None or (status_code is not None and status_code >= 400)
        logger.log(logging.WARNING if failed else logging.INFO, self.format(entry))
        return entry
