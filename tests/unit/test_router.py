"""
Unit tests for URL router.
"""

import pytest

from microhttp.http.router import Router, Route, RouteMatch
from microhttp.http.request import HTTPRequest, Method
from microhttp.http.response import HTTPResponse, text


def make_request(method: Method, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    """Dummy handler for testing."""
    return text(request.path)


def other_handler(request: HTTPRequest) -> HTTPResponse:
    return text("other")


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        """Test adding routes."""
        router = Router()
        route = router.add_route("GET", "/user-agent", dummy_handler)

        assert isinstance(route, Route)
        assert route.method is Method.GET
        assert router.routes() == [route]

    def test_match_static_path(self):
        """Test matching literal paths."""
        router = Router()
        router.add_route(Method.GET, "/", dummy_handler)
        router.add_route(Method.GET, "/user-agent", other_handler)

        match = router.resolve(Method.GET, "/")
        assert isinstance(match, RouteMatch)
        assert match.handler is dummy_handler
        assert match.params == {}

        match = router.resolve(Method.GET, "/user-agent")
        assert match.handler is other_handler
        assert match.params == {}

    def test_match_with_method(self):
        """Test that each method has its own table."""
        router = Router()
        router.add_route(Method.GET, "/files/{file}", dummy_handler)
        router.add_route(Method.POST, "/files/{file}", other_handler)

        assert router.resolve(Method.GET, "/files/a").handler is dummy_handler
        assert router.resolve(Method.POST, "/files/a").handler is other_handler

    def test_unregistered_method(self):
        """Test that a method with no routes resolves to None."""
        router = Router()
        router.add_route(Method.GET, "/", dummy_handler)

        assert router.resolve(Method.POST, "/") is None

    def test_match_wildcard(self):
        """Test wildcard path parameters."""
        router = Router()
        router.add_route(Method.GET, "/echo/{echo}", dummy_handler)

        match = router.resolve(Method.GET, "/echo/abc")
        assert match.params == {"echo": "abc"}

    def test_wildcard_never_spans_slash(self):
        """Test that a wildcard matches exactly one segment."""
        router = Router()
        router.add_route(Method.GET, "/echo/{echo}", dummy_handler)

        assert router.resolve(Method.GET, "/echo/a/b") is None

    def test_wildcard_needs_non_empty_segment(self):
        """Test that an empty segment does not satisfy a wildcard."""
        router = Router()
        router.add_route(Method.GET, "/echo/{echo}", dummy_handler)

        assert router.resolve(Method.GET, "/echo/") is None
        assert router.resolve(Method.GET, "/echo") is None

    def test_multiple_wildcards(self):
        """Test patterns with several parameters."""
        router = Router()
        router.add_route(Method.GET, "/a/{x}/b/{y}", dummy_handler)

        match = router.resolve(Method.GET, "/a/1/b/2")
        assert match.params == {"x": "1", "y": "2"}

    def test_literal_beats_wildcard(self):
        """Test that a literal segment is preferred over a wildcard."""
        router = Router()
        router.add_route(Method.GET, "/files/{file}", dummy_handler)
        router.add_route(Method.GET, "/files/index", other_handler)

        assert router.resolve(Method.GET, "/files/index").handler is other_handler
        assert router.resolve(Method.GET, "/files/other").handler is dummy_handler

    def test_backtracks_to_wildcard(self):
        """Test falling back to a wildcard when the literal branch dead-ends."""
        router = Router()
        router.add_route(Method.GET, "/a/b/c", other_handler)
        router.add_route(Method.GET, "/a/{x}/d", dummy_handler)

        match = router.resolve(Method.GET, "/a/b/d")
        assert match.handler is dummy_handler
        assert match.params == {"x": "b"}

    def test_trailing_slash_is_distinct(self):
        """Test that /user-agent/ does not match /user-agent."""
        router = Router()
        router.add_route(Method.GET, "/user-agent", dummy_handler)

        assert router.resolve(Method.GET, "/user-agent/") is None

    def test_no_match(self):
        """Test no match returns None."""
        router = Router()
        router.add_route(Method.GET, "/", dummy_handler)

        assert router.resolve(Method.GET, "/nonexistent") is None

    def test_duplicate_route(self):
        """Test that registering the same method and pattern twice fails."""
        router = Router()
        router.add_route(Method.GET, "/echo/{echo}", dummy_handler)

        with pytest.raises(ValueError):
            router.add_route(Method.GET, "/echo/{echo}", other_handler)

    def test_conflicting_wildcard_names(self):
        """Test that two names at one position are rejected."""
        router = Router()
        router.add_route(Method.GET, "/files/{file}", dummy_handler)

        with pytest.raises(ValueError):
            router.add_route(Method.GET, "/files/{name}/raw", other_handler)

    def test_same_pattern_other_method_allowed(self):
        """Test that wildcard names are scoped per method."""
        router = Router()
        router.add_route(Method.GET, "/files/{file}", dummy_handler)
        router.add_route(Method.POST, "/files/{name}", other_handler)

        assert router.resolve(Method.POST, "/files/x").params == {"name": "x"}

    def test_malformed_wildcard(self):
        """Test that half-open braces are rejected."""
        router = Router()

        with pytest.raises(ValueError):
            router.add_route(Method.GET, "/echo/{echo", dummy_handler)
        with pytest.raises(ValueError):
            router.add_route(Method.GET, "/echo/{}", dummy_handler)

    def test_unknown_method(self):
        """Test that an unsupported method name is rejected."""
        router = Router()

        with pytest.raises(ValueError):
            router.add_route("DELETE", "/", dummy_handler)

    def test_frozen_router_rejects_routes(self):
        """Test that registration fails after freeze()."""
        router = Router()
        router.add_route(Method.GET, "/", dummy_handler)
        router.freeze()

        assert router.frozen is True
        with pytest.raises(RuntimeError):
            router.add_route(Method.GET, "/late", dummy_handler)
        assert router.resolve(Method.GET, "/") is not None

    def test_allowed_methods(self):
        """Test listing methods that accept a path."""
        router = Router()
        router.add_route(Method.GET, "/files/{file}", dummy_handler)
        router.add_route(Method.POST, "/files/{file}", dummy_handler)
        router.add_route(Method.GET, "/", dummy_handler)

        assert router.allowed_methods("/files/a") == ["GET", "POST"]
        assert router.allowed_methods("/") == ["GET"]
        assert router.allowed_methods("/nope") == []


class TestRouterDecorators:
    """Tests for decorator-style route registration."""

    def test_get_decorator(self):
        """Test @router.get decorator."""
        router = Router()

        @router.get("/echo/{echo}")
        def echo(request):
            return text(request.params["echo"])

        match = router.resolve(Method.GET, "/echo/xyz")
        assert match.handler is echo

    def test_post_decorator(self):
        """Test @router.post decorator."""
        router = Router()

        @router.post("/files/{file}")
        def upload(request):
            return text("ok")

        assert router.resolve(Method.POST, "/files/a").handler is upload
        assert router.resolve(Method.GET, "/files/a") is None


class TestRouterHandle:
    """Tests for Router.handle()."""

    def test_handle_passes_params(self):
        """Test that the handler sees the extracted params."""
        router = Router()

        @router.get("/echo/{echo}")
        def echo(request):
            return text(request.params["echo"])

        response = router.handle(make_request(Method.GET, "/echo/abc"))
        assert response.body == b"abc"

    def test_handle_no_match(self):
        """Test that a miss returns None."""
        router = Router()

        assert router.handle(make_request(Method.GET, "/")) is None
