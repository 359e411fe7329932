"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.x request bytes into immutable HTTPRequest objects.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /echo/abc?x=1 HTTP/1.1\r\n        ← START LINE               │
    │    ─┬─ ──────┬────── ────┬───                                       │
    │   Method   Target     Version                                       │
    │                                                                      │
    │    Host: localhost:4221\r\n              ← HEADERS                  │
    │    Accept-Encoding: gzip\r\n               "Name: Value" lines      │
    │    \r\n                                  ← EMPTY LINE               │
    │                                                                      │
    │    [raw body bytes]                      ← BODY (optional)          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. START LINE is split on single spaces into EXACTLY three tokens.
   Anything else, a target not starting with "/", or an unknown method
   or version raises HTTPParseError.
   The connection cannot recover from that, so no response is sent.

2. HEADER LINES are split on the first ": ". A line without ": " ends
   the header section. The empty line is the normal case, but a
   malformed line is treated the same way (tolerant parsing):

       GET / HTTP/1.1\r\n
       Host: a\r\n
       garbage\r\n          ← header section ends HERE
       X-Late: b\r\n        ← this is now part of the body

3. BODY is everything after the terminating line, byte for byte.
   We work on bytes, not text, so binary uploads survive untouched.

Header names keep their case: "User-Agent" and "user-agent" are two
different keys. On duplicate names the last one wins.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qs


CRLF = b"\r\n"


class HTTPParseError(ValueError):
    """
    Raised when request bytes cannot be turned into an HTTPRequest.

    Parse errors are fatal to the connection that produced them.
    """


class Method(str, Enum):
    """Request methods the server understands."""
    GET = "GET"
    POST = "POST"


class HTTPVersion(str, Enum):
    """
    Protocol versions accepted on the start line.

    All four parse, but only HTTP/1.0 and HTTP/1.1 semantics are
    implemented. HTTP/2 and HTTP/3 framing is out of scope.
    """
    HTTP_1_0 = "HTTP/1.0"
    HTTP_1_1 = "HTTP/1.1"
    HTTP_2 = "HTTP/2"
    HTTP_3 = "HTTP/3"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Requests are immutable. The router never edits one in place; it asks
    for a copy with the matched path parameters via with_params():

        Raw bytes ──parse──► HTTPRequest(params={})
                                   │
                              Router.resolve()
                                   │
                                   ▼
                          HTTPRequest(params={"echo": "abc"}) ──► handler

    Attributes:
        method:         Method enum member.
        path:           Request path without query string or fragment.
        version:        HTTPVersion enum member.
        headers:        Case-sensitive header mapping.
        body:           Raw body bytes, or None when nothing followed the
                        header section.
        params:         Path parameters filled in by the router.
        query:          Raw query string ("" when absent).
        client_address: (ip, port) of the peer, for logging.
    """

    method: Method
    path: str
    version: HTTPVersion = HTTPVersion.HTTP_1_1
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    params: Dict[str, str] = field(default_factory=dict)
    query: str = ""
    client_address: Tuple[str, int] = ("", 0)

    def with_params(self, params: Mapping[str, str]) -> "HTTPRequest":
        """Return a copy carrying `params`, replacing any earlier ones."""
        return replace(self, params=dict(params))

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Exact-case header lookup."""
        return self.headers.get(name, default)

    @property
    def user_agent(self) -> str:
        return self.headers.get("User-Agent", "")

    @property
    def wants_close(self) -> bool:
        """
        True when the client sent exactly `Connection: close`.

        Only the literal value "close" counts; "Close" or
        "keep-alive, close" do not.
        """
        return self.headers.get("Connection") == "close"

    @property
    def query_params(self) -> Dict[str, List[str]]:
        """Parsed query string: "?a=1&a=2" → {"a": ["1", "2"]}."""
        return parse_qs(self.query, keep_blank_values=True)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────┐
        │  1. Start line ──► METHOD SP TARGET SP VERSION                 │
        │     │  wrong shape, bad target, unknown token → HTTPParseError │
        │     ▼                                                          │
        │  2. Header lines until one has no ": "                         │
        │     ▼                                                          │
        │  3. Remaining bytes → body (None if empty)                     │
        │     ▼                                                          │
        │  4. Split target into path and query                           │
        └───────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    The parser is stateless; one instance can be shared by every
    connection thread.
    """

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one complete request message.

        Args:
            data: Raw bytes of a single request.
            client_address: Peer address, stored on the request.

        Returns:
            The parsed request, with empty params.

        Raises:
            HTTPParseError: If the start line is malformed or names an
                            unknown method or version.
        """
        if not data:
            raise HTTPParseError("Empty request")

        line, pos = _next_line(data, 0)
        method, target, version = self._parse_start_line(line)

        headers: Dict[str, str] = {}
        while pos < len(data):
            line, pos = _next_line(data, pos)
            header = _split_header(line)
            if header is None:
                break  # empty or malformed line ends the header section
            name, value = header
            headers[name] = value

        body = data[pos:] or None
        path, query = _split_target(target)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            query=query,
            client_address=client_address,
        )

    def _parse_start_line(self, line: bytes) -> Tuple[Method, str, HTTPVersion]:
        try:
            text = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Start line is not valid UTF-8: {e}") from e

        parts = text.split(" ")
        if len(parts) != 3:
            raise HTTPParseError(f"Malformed start line: {text!r}")

        method_token, target, version_token = parts
        if not target.startswith("/"):
            raise HTTPParseError(f"Request target must start with '/': {target!r}")
        try:
            method = Method(method_token)
        except ValueError:
            raise HTTPParseError(f"Unsupported method: {method_token!r}") from None
        try:
            version = HTTPVersion(version_token)
        except ValueError:
            raise HTTPParseError(f"Unsupported version: {version_token!r}") from None

        return method, target, version


def _next_line(data: bytes, start: int) -> Tuple[bytes, int]:
    """Return the line starting at `start` and the offset just past its CRLF."""
    end = data.find(CRLF, start)
    if end == -1:
        return data[start:], len(data)
    return data[start:end], end + len(CRLF)


def _split_header(line: bytes) -> Optional[Tuple[str, str]]:
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError:
        return None
    name, sep, value = text.partition(": ")
    if not sep:
        return None
    return name, value


def _split_target(target: str) -> Tuple[str, str]:
    """Split "/echo/abc?x=1#top" into ("/echo/abc", "x=1")."""
    target = target.split("#", 1)[0]
    path, _, query = target.partition("?")
    return path, query


_default_parser = RequestParser()


def parse_request(data: bytes, client_address: Tuple[str, int] = ("", 0)) -> HTTPRequest:
    """Parse `data` with a shared RequestParser."""
    return _default_parser.parse(data, client_address)
