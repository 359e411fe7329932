"""
Small stateless handlers: root, echo, and user-agent.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, empty, text


def index(request: HTTPRequest) -> HTTPResponse:
    """GET / → bare "200 OK"."""
    return empty()


def echo(request: HTTPRequest) -> HTTPResponse:
    """GET /echo/{echo} → the path parameter as text/plain."""
    return text(request.params.get("echo", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """GET /user-agent → the User-Agent header as text/plain (empty if absent)."""
    return text(request.user_agent)
