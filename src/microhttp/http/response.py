"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

Builds HTTP responses and serializes them to raw bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                   ← STATUS LINE              │
    │    ───┬──── ───┬──                                                   │
    │    Version   Status (code + phrase, ONE field)                      │
    │                                                                      │
    │    Content-Type: text/plain\r\n          ← HEADERS                  │
    │    Content-Length: 5\r\n                                            │
    │    \r\n                                  ← EMPTY LINE               │
    │                                                                      │
    │    hello                                 ← BODY (raw bytes)         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT SERIALIZATION DOES NOT DO
=============================================================================

to_bytes() writes exactly what the response holds. It does NOT add
Content-Length, Date, or Server headers. Whoever sets a body also sets
Content-Length; the helpers below (text(), octet_stream()) do that for
you. The one exception is gzip: the connection handler rewrites
Content-Encoding and Content-Length after compressing a body.

Header iteration order is whatever the dict holds. HTTP does not care
about header order, and neither should tests: compare header sets.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from .request import CRLF, HTTPVersion
from .status_codes import HTTPStatus, StatusLike, status_line


@dataclass
class HTTPResponse:
    """
    An HTTP response to be written to the client.

    Attributes:
        status:  Status line text, e.g. "200 OK" or "404 Not Found".
        headers: Header name → value.
        body:    Raw body bytes, or None for no body.
        version: Protocol version for the status line.

    Invariant (kept by the caller, not checked here): if Content-Length
    is present it equals len(body).
    """

    status: str = HTTPStatus.OK.line
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    version: HTTPVersion = HTTPVersion.HTTP_1_1

    @property
    def has_body(self) -> bool:
        """True if there are body bytes to write. None and b"" both count as none."""
        return bool(self.body)

    @property
    def status_line(self) -> str:
        """Version and status, e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version.value} {self.status}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes], content_type: Optional[str] = None) -> "HTTPResponse":
        """
        Set the body and a matching Content-Length.

        Strings are encoded as UTF-8.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body
        if content_type is not None:
            self.headers["Content-Type"] = content_type
        self.headers["Content-Length"] = str(len(body))
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize to wire format.

            "<version> <status>\\r\\n"
            "<name>: <value>\\r\\n"   (one per header)
            "\\r\\n"
            <body>                   (no trailing terminator)
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
        if self.has_body:
            return head + self.body
        return head


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the handlers produce.
#
#     return text("abc")            # 200, text/plain, Content-Length: 3
#     return octet_stream(data)     # 200, application/octet-stream
#     return not_found()            # bare "404 Not Found"
#
# =============================================================================

def empty(status: StatusLike = HTTPStatus.OK) -> HTTPResponse:
    """A response with the given status and no headers or body."""
    return HTTPResponse(status=status_line(status))


def text(body: Union[str, bytes], status: StatusLike = HTTPStatus.OK) -> HTTPResponse:
    """A text/plain response with Content-Length set."""
    return empty(status).set_body(body, "text/plain")


def octet_stream(data: bytes, status: StatusLike = HTTPStatus.OK) -> HTTPResponse:
    """An application/octet-stream response with Content-Length set."""
    return empty(status).set_body(data, "application/octet-stream")


def created() -> HTTPResponse:
    """Bare "201 Created"."""
    return empty(HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """Bare "404 Not Found"."""
    return empty(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """Bare "500 Internal Server Error" with an explicit zero length."""
    return empty(HTTPStatus.INTERNAL_SERVER_ERROR).set_header("Content-Length", "0")


def parse_response(data: bytes) -> Tuple[str, str, Dict[str, str], bytes]:
    """
    Split serialized response bytes into (version, status, headers, body).

    The inverse of HTTPResponse.to_bytes(). Used by tests and small
    clients; the server itself never reads responses.

    Raises:
        ValueError: If there is no status line or no header terminator.
    """
    head, sep, body = data.partition(CRLF + CRLF)
    if not sep:
        raise ValueError("Incomplete response: missing header terminator")

    lines = head.decode("utf-8").split("\r\n")
    version, _, status = lines[0].partition(" ")
    if not status:
        raise ValueError(f"Malformed status line: {lines[0]!r}")

    headers: Dict[str, str] = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return version, status, headers, body
