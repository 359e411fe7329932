"""
=============================================================================
GZIP CONTENT ENCODING
=============================================================================

Compresses response bodies when the client asks for gzip.

=============================================================================
HOW NEGOTIATION WORKS HERE
=============================================================================

    Client request                       Server response
    ──────────────                       ───────────────
    Accept-Encoding: deflate, gzip  ──►  Content-Encoding: gzip
                                         Content-Length: <compressed size>
                                         <gzip bytes>

    Accept-Encoding: br             ──►  (body sent as-is)

The Accept-Encoding value is split on commas and each token is trimmed.
The token must be exactly "gzip": "GZIP" or "gzip;q=0" do not count.
There is no negotiation beyond gzip.

=============================================================================
WHO COMPRESSES
=============================================================================

The connection handler, never the route handlers. It calls
maybe_compress() once per response, after the handler returns and
before serialization, so every handler that produces a body benefits
without doing anything. A response that already carries a
Content-Encoding header is left alone: a body is never compressed twice.

=============================================================================
"""

import gzip
from typing import Mapping, Optional

from .response import HTTPResponse


GZIP = "gzip"
DEFAULT_LEVEL = 6


def accepts_gzip(headers: Mapping[str, str]) -> bool:
    """True if the request's Accept-Encoding lists the gzip token."""
    value: Optional[str] = headers.get("Accept-Encoding")
    if value is None:
        return False
    return any(token.strip() == GZIP for token in value.split(","))


def compress_body(body: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """gzip-compress `body`. Level 1 is fastest, 9 is smallest."""
    return gzip.compress(body, compresslevel=level)


def maybe_compress(
    request_headers: Mapping[str, str],
    response: HTTPResponse,
    level: int = DEFAULT_LEVEL,
) -> bool:
    """
    Gzip the response body in place if the request negotiated it.

    Conditions:
        1. Request Accept-Encoding lists "gzip"
        2. Response has a non-empty body
        3. Response has no Content-Encoding yet

    On success the body is replaced, Content-Encoding is set to gzip and
    Content-Length is recomputed.

    Returns:
        True if the body was compressed.
    """
    if not response.has_body:
        return False
    if "Content-Encoding" in response.headers:
        return False
    if not accepts_gzip(request_headers):
        return False

    response.body = compress_body(response.body, level)
    response.headers["Content-Encoding"] = GZIP
    response.headers["Content-Length"] = str(len(response.body))
    return True
