"""
HTTP protocol components.

Status codes, the response builder, the fixed response templates and the
content-type classifier. The request line parser lives in
webserver.http.request and the response writer in webserver.http.writer.
"""

from .status_codes import HTTPStatus
from .response import HTTPResponse, ResponseBuilder, format_http_date
from .templates import ResponseTemplates
from .mime_types import classify, get_content_type, get_extension

__all__ = [
    "HTTPStatus",
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",
    "ResponseTemplates",
    "classify",
    "get_content_type",
    "get_extension",
]
