"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) pairs to handler functions and extracts path
parameters from `{name}` segments.

=============================================================================
ROUTE PATTERNS
=============================================================================

    Pattern              Path                 Params
    ───────────────────  ───────────────────  ──────────────────────────
    /                    /                    {}
    /user-agent          /user-agent          {}
    /echo/{echo}         /echo/abc            {"echo": "abc"}
    /files/{file}        /files/a.txt         {"file": "a.txt"}
    /files/{file}        /files/a/b.txt       no match (two segments)
    /echo/{echo}         /echo/               no match (empty segment)

A `{name}` segment matches exactly ONE non-empty path segment (no "/").
There are no multi-segment or optional wildcards.

=============================================================================
ONE TRIE PER METHOD
=============================================================================

    GET ──► (root) ─┬─ "echo" ── {echo}           → echo handler
                    ├─ "user-agent"               → user-agent handler
                    └─ "files" ── {file}          → file download
    POST ─► (root) ─── "files" ── {file}          → file upload

Resolution walks the method's trie one segment at a time. Literal
children are tried before the wildcard child, and the walk backtracks
if a literal branch dead-ends, so "/echo/{echo}" and "/echo/raw" can
live side by side.

=============================================================================
REGISTRATION RULES
=============================================================================

- Registering the same (method, pattern) twice raises ValueError.
- Two patterns with differently named wildcards at the same position
  (/a/{x} and /a/{y}/b) raise ValueError.
- freeze() locks the table. The server freezes it before accepting the
  first connection; after that every registration raises RuntimeError.
  A frozen router is only ever read, so connection threads share it
  without locks.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from .request import HTTPRequest, Method
from .response import HTTPResponse


# Type alias for handler functions
# A handler takes an HTTPRequest and returns an HTTPResponse.
# Raising an exception is how a handler reports failure.
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass(frozen=True)
class Route:
    """
    A registered route: (method, pattern, handler).

    Example:
        Route(method=Method.GET, pattern="/echo/{echo}", handler=echo)
    """
    method: Method
    pattern: str
    handler: Handler


@dataclass
class RouteMatch:
    """
    Result of a successful resolve().

    Example:
        Pattern: /echo/{echo}
        Path:    /echo/abc
        Result:  RouteMatch(route=<Route>, params={"echo": "abc"})
    """
    route: Route
    params: Dict[str, str]

    @property
    def handler(self) -> Handler:
        return self.route.handler


@dataclass
class _Node:
    """One trie level. `route` is set when a pattern ends here."""
    literals: Dict[str, "_Node"] = field(default_factory=dict)
    param_name: Optional[str] = None
    param_child: Optional["_Node"] = None
    route: Optional[Route] = None


def _split_path(path: str) -> List[str]:
    """
    "/files/a.txt" → ["files", "a.txt"], "/" → [].

    Only the single leading slash is dropped. Every other slash delimits
    a segment, so "/echo/" → ["echo", ""] and the empty segment can never
    satisfy a wildcard.
    """
    if path.startswith("/"):
        path = path[1:]
    if not path:
        return []
    return path.split("/")


def _param_name(segment: str) -> Optional[str]:
    """Return the wildcard name of a `{name}` segment, else None."""
    if "{" not in segment and "}" not in segment:
        return None
    if not (segment.startswith("{") and segment.endswith("}")) or len(segment) < 3:
        raise ValueError(f"Malformed wildcard segment: {segment!r}")
    name = segment[1:-1]
    if "{" in name or "}" in name:
        raise ValueError(f"Malformed wildcard segment: {segment!r}")
    return name


class Router:
    """
    Per-method segment-trie router.

    Usage:
        router = Router()

        @router.get("/echo/{echo}")
        def echo(request):
            return text(request.params["echo"])

        router.freeze()
        match = router.resolve(Method.GET, "/echo/abc")
        match.params        # {"echo": "abc"}
    """

    def __init__(self):
        self._trees: Dict[Method, _Node] = {}
        self._routes: List[Route] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Router":
        """Lock the route table. Idempotent."""
        self._frozen = True
        return self

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: Union[Method, str],
        pattern: str,
        handler: Handler,
    ) -> Route:
        """
        Register `handler` for `method` and `pattern`.

        Args:
            method: Method enum member or its name ("GET").
            pattern: Path pattern such as "/files/{file}".
            handler: Callable taking an HTTPRequest, returning an HTTPResponse.

        Returns:
            The registered Route.

        Raises:
            RuntimeError: If the router is frozen.
            ValueError: On a duplicate route, a conflicting wildcard name,
                        a malformed wildcard, or an unknown method.
        """
        if self._frozen:
            raise RuntimeError(f"Router is frozen; cannot add {method} {pattern}")

        method = Method(method)
        route = Route(method=method, pattern=pattern, handler=handler)

        node = self._trees.setdefault(method, _Node())
        for segment in _split_path(pattern):
            name = _param_name(segment)
            if name is None:
                node = node.literals.setdefault(segment, _Node())
                continue

            if node.param_child is None:
                node.param_name = name
                node.param_child = _Node()
            elif node.param_name != name:
                raise ValueError(
                    f"Conflicting wildcard names at {pattern}: "
                    f"{{{node.param_name}}} vs {{{name}}}"
                )
            node = node.param_child

        if node.route is not None:
            raise ValueError(f"Duplicate route: {method.value} {pattern}")
        node.route = route

        self._routes.append(route)
        return route

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def resolve(self, method: Union[Method, str], path: str) -> Optional[RouteMatch]:
        """
        Find the handler for `method` and `path`.

        Returns:
            RouteMatch with extracted params, or None when nothing matches
            (no trie for the method, or no pattern fits the path).
        """
        try:
            method = Method(method)
        except ValueError:
            return None

        root = self._trees.get(method)
        if root is None:
            return None

        params: Dict[str, str] = {}
        route = self._walk(root, _split_path(path), 0, params)
        if route is None:
            return None
        return RouteMatch(route=route, params=params)

    def _walk(
        self,
        node: _Node,
        segments: List[str],
        index: int,
        params: Dict[str, str],
    ) -> Optional[Route]:
        if index == len(segments):
            return node.route

        segment = segments[index]

        child = node.literals.get(segment)
        if child is not None:
            route = self._walk(child, segments, index + 1, params)
            if route is not None:
                return route

        if node.param_child is not None and segment:
            params[node.param_name] = segment
            route = self._walk(node.param_child, segments, index + 1, params)
            if route is not None:
                return route
            del params[node.param_name]

        return None

    def allowed_methods(self, path: str) -> List[str]:
        """Names of the methods that have a pattern matching `path`."""
        return sorted(m.value for m in self._trees if self.resolve(m, path) is not None)

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def handle(self, request: HTTPRequest) -> Optional[HTTPResponse]:
        """
        Resolve and invoke in one step.

        Returns None when no route matches, so the caller decides what a
        miss looks like on the wire.
        """
        match = self.resolve(request.method, request.path)
        if match is None:
            return None
        return match.handler(request.with_params(match.params))

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================
    #
    #     @router.get("/user-agent")
    #     def user_agent(request):
    #         ...
    #
    # is the same as router.add_route(Method.GET, "/user-agent", user_agent)
    # =========================================================================

    def route(self, method: Union[Method, str], pattern: str) -> Callable[[Handler], Handler]:
        """Decorator registering the wrapped function; returns it unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, pattern, handler)
            return handler
        return decorator

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(Method.GET, pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(Method.POST, pattern)
