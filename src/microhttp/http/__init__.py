"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The message model and routing layer: raw bytes in, structured requests
out; structured responses in, raw bytes out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /echo/abc HTTP/1.1\r\n..." → HTTPRequest(method=GET, ...)   │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE MODEL (response.py)                                        │
    │   HTTPResponse("200 OK", {...}, b"abc") → b"HTTP/1.1 200 OK\r\n..." │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   (GET, "/echo/abc") → echo handler, {"echo": "abc"}                │
    ├─────────────────────────────────────────────────────────────────────┤
    │ COMPRESSION (compression.py)                                        │
    │   Accept-Encoding: gzip → gzip body, Content-Encoding: gzip         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus.NOT_FOUND.line → "404 Not Found"                       │
    └─────────────────────────────────────────────────────────────────────┘
"""

from .request import (
    HTTPRequest,
    HTTPVersion,
    Method,
    RequestParser,
    HTTPParseError,
    parse_request,
)
from .response import (
    HTTPResponse,
    empty,
    text,
    octet_stream,
    created,
    not_found,
    internal_error,
    parse_response,
)
from .router import Router, Route, RouteMatch, Handler
from .status_codes import HTTPStatus
from .compression import accepts_gzip, maybe_compress

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPVersion",
    "Method",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "empty",
    "text",
    "octet_stream",
    "created",
    "not_found",
    "internal_error",
    "parse_response",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "Handler",

    # Status codes
    "HTTPStatus",

    # Content encoding
    "accepts_gzip",
    "maybe_compress",
]
