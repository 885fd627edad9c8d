"""
=============================================================================
RESPONSE TEMPLATES
=============================================================================

The fixed responses this server knows how to send.

    ┌────────────────────┬────────┬──────────────────────────────────────┐
    │ Template           │ Status │ Filled in with                       │
    ├────────────────────┼────────┼──────────────────────────────────────┤
    │ success_header     │ 200    │ content type (head only, no body)    │
    │ landing_page       │ 200    │ listening port, five times           │
    │ bad_request        │ 400    │ nothing                              │
    │ not_found          │ 404    │ requested path                       │
    │ bad_method         │ 501    │ requested method                     │
    └────────────────────┴────────┴──────────────────────────────────────┘

Each template returns an HTTPResponse. Serialized with to_bytes() it is a
complete HTTP response: status line, headers, blank line and body.

=============================================================================
REFLECTED VALUES
=============================================================================

The 404 and 501 pages echo a value taken straight from the request line.
By default the value is inserted verbatim:

    GET /<script>alert(1)</script> HTTP/1.1
    → ... <code>/<script>alert(1)</script></code> ...

Construct the store with escape_reflected=True to HTML-escape those
values instead. The status line and headers never contain request data.

=============================================================================
"""

import html
from typing import Optional

from .response import HTTPResponse, ResponseBuilder
from .status_codes import HTTPStatus


_PAGE_HEAD = (
    "<!DOCTYPE html>\n"
    "<html lang=en>\n"
    "  <meta charset=utf-8>\n"
    "  <meta name=viewport content='initial-scale=1, minimum-scale=1, width=device-width'>\n"
)

# Files linked from the landing page, in display order
LANDING_PAGE_LINKS = ("report.pdf", "README.txt", "webserver.c", "image.jpg", "Makefile")

_LANDING_LINK = (
    "  <p>You may try to access "
    '<a href="http://localhost:{port}/{name}">{name}</a></p>\n'
)

_LANDING_PAGE = (
    _PAGE_HEAD
    + "  <title>Webserver</title>\n"
    "  \n"
    "  <p>This server provides you html, jpg, pdf, and jpeg files.</p>\n"
    "{links}"
    "</body></html>\n"
)

_BAD_REQUEST_PAGE = (
    _PAGE_HEAD
    + "  <title>Error 400 (Bad Request)!!</title>\n"
    "  <p><b>400.</b> <ins>That’s an error.</ins></p>\n"
    "  <p>This server didn't understand your request.</p></body></html>\n"
)

_NOT_FOUND_PAGE = (
    _PAGE_HEAD
    + "  <title>Error 404 (Not Found)!!</title>\n"
    "  <p><b>404.</b> <ins>That’s an error.</ins></p>\n"
    "  <p>The requested URL <code>{path}</code> was not found on this server."
    "  <ins>That’s all we know.</ins></p></body></html>\n"
)

_BAD_METHOD_PAGE = (
    _PAGE_HEAD
    + "  <title>Error 501 (Not Found)!!</title>\n"
    "  <p><b>501.</b> <ins>That’s an error.</ins></p>\n"
    "  <p>The method <code>{method}</code> was not implemented on this server. </p></body></html>\n"
)


class ResponseTemplates:
    """
    Store of the server's fixed responses.

    Holds no per-request state; one instance is shared by every request.

    Args:
        escape_reflected: HTML-escape request values echoed in error pages.
    """

    def __init__(self, escape_reflected: bool = False):
        self.escape_reflected = escape_reflected

    def _builder(self, status: HTTPStatus) -> ResponseBuilder:
        return ResponseBuilder().status(status).close_connection()

    def _reflect(self, value: str) -> str:
        if self.escape_reflected:
            return html.escape(value, quote=True)
        return value

    def success_header(self, content_type: str, content_length: Optional[int] = None) -> HTTPResponse:
        """
        200 OK head for a file whose bytes follow separately.

        Args:
            content_type: MIME type from the content-type classifier.
            content_length: Size of the file, if known.
        """
        builder = self._builder(HTTPStatus.OK).content_type(content_type)
        if content_length is not None:
            builder.header("Content-Length", str(content_length))
        return builder.build()

    def landing_page(self, port: int) -> HTTPResponse:
        """The page served for "/", with every link pointing at `port`."""
        links = "".join(
            _LANDING_LINK.format(port=port, name=name) for name in LANDING_PAGE_LINKS
        )
        return self._builder(HTTPStatus.OK).html(_LANDING_PAGE.format(links=links)).build()

    def bad_request(self) -> HTTPResponse:
        """400 Bad Request with a static page."""
        return self._builder(HTTPStatus.BAD_REQUEST).html(_BAD_REQUEST_PAGE).build()

    def not_found(self, path: str) -> HTTPResponse:
        """404 Not Found echoing the requested path."""
        page = _NOT_FOUND_PAGE.format(path=self._reflect(path))
        return self._builder(HTTPStatus.NOT_FOUND).html(page).build()

    def bad_method(self, method: str) -> HTTPResponse:
        """501 Method Not Implemented echoing the requested method."""
        page = _BAD_METHOD_PAGE.format(method=self._reflect(method))
        return self._builder(HTTPStatus.NOT_IMPLEMENTED).html(page).build()
