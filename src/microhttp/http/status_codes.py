"""
=============================================================================
HTTP STATUS LINES
=============================================================================

The handful of HTTP status codes this server emits, with their reason
phrases.

=============================================================================
STATUS CODE VS STATUS LINE
=============================================================================

A response stores its status as ONE string: the code and the reason phrase
together, exactly as they appear on the wire after the version:

    HTTP/1.1 404 Not Found\r\n
             ─────────────
                   │
                   └── HTTPResponse.status == "404 Not Found"

There is no separate numeric field. HTTPStatus exists so code can say
HTTPStatus.NOT_FOUND instead of typing the string by hand:

    >>> HTTPStatus.NOT_FOUND.line
    '404 Not Found'

=============================================================================
"""

from enum import IntEnum
from typing import Union


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server and its handlers.

    Extends IntEnum, so members compare equal to their integer code:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
    """

    # 2xx SUCCESS
    OK = 200                        # Standard success
    CREATED = 201                   # File stored (POST /files/...)

    # 4xx CLIENT ERROR
    NOT_FOUND = 404                 # No route, or missing file

    # 5xx SERVER ERROR
    INTERNAL_SERVER_ERROR = 500     # Handler failed (hardened mode)

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return _STATUS_PHRASES[self]

    @property
    def line(self) -> str:
        """
        The status as it appears on the wire after the version.

        Example: HTTPStatus.CREATED.line == "201 Created"
        """
        return f"{int(self)} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


StatusLike = Union[HTTPStatus, str]


def status_line(status: StatusLike) -> str:
    """
    Normalize a status to its wire text.

    Accepts an HTTPStatus member or a ready-made string such as
    "418 I'm a teapot", which is passed through untouched.
    """
    if isinstance(status, HTTPStatus):
        return status.line
    return status
