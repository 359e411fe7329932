"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

The orchestrator that ties the components together.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         HTTPServer                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │     ┌──────────────┐    ┌──────────────────┐    ┌──────────────┐    │
    │     │ SocketServer │───►│ConnectionHandler │───►│    Router    │    │
    │     │ (accept loop)│    │ (per-conn loop)  │    │ (route table)│    │
    │     └──────────────┘    └──────────────────┘    └──────────────┘    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT        SocketServer accepts a TCP connection
    2. THREAD        A new daemon thread takes the connection
    3. READ          Bytes buffered until one request is complete
    4. PARSE         Bytes → HTTPRequest
    5. ROUTE         Router picks the handler; none → 404
    6. HANDLE        Handler returns HTTPResponse
    7. COMPRESS      gzip if the client accepts it
    8. SEND          Response serialized and written
    9. KEEP-ALIVE    Loop, unless the client sent Connection: close

Routes are registered before serving starts. serve() freezes the route
table, so every connection thread reads it without locks.

=============================================================================
"""

import logging
import socket
from typing import Optional, Tuple, Union

from .config import ServerConfig
from .core import ConnectionHandler, SocketServer
from .handlers import register_routes
from .http import Handler, Method, RequestParser, Route, Router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8080))

        @server.get("/echo/{echo}")
        def echo(request):
            return text(request.params["echo"])

        server.run()  # blocks until Ctrl+C

    For embedding and tests, bind a listener yourself and call serve()
    on a background thread; shutdown() stops it.
    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._router = Router()
        self._parser = RequestParser()
        self._socket_server = SocketServer(self.config)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), once serving."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(self, method: Union[Method, str], pattern: str, handler: Handler) -> Route:
        return self._router.add_route(method, pattern, handler)

    def route(self, method: Union[Method, str], pattern: str):
        """Register a route handler for `method`."""
        return self._router.route(method, pattern)

    def get(self, pattern: str):
        """Register a GET route."""
        return self._router.get(pattern)

    def post(self, pattern: str):
        """Register a POST route."""
        return self._router.post(pattern)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def serve(self, listener: socket.socket):
        """
        Serve on an already-bound listening socket (blocking).

        Freezes the route table first; any later registration raises
        RuntimeError. Returns after shutdown(), or re-raises an accept error.
        """
        self._router.freeze()
        handler = ConnectionHandler(
            self._router,
            parser=self._parser,
            gzip_level=self.config.gzip_level,
            handler_errors_as_500=self.config.handler_errors_as_500,
        )
        logger.debug(f"Serving {len(self._router.routes())} routes")
        self._socket_server.serve(listener, handler)

    def run(self):
        """
        Bind from the config, configure logging, and serve (blocking).

        Stops on Ctrl+C. Bind and accept errors propagate to the caller.
        """
        self._setup_logging()
        listener = self._socket_server.create_listener()
        try:
            self.serve(listener)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.shutdown()
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe to call from another thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop is running."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("microhttp").setLevel(level)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Build a server with the standard routes.

        GET  /                 GET  /user-agent
        GET  /echo/{echo}      GET  /files/{file}
                               POST /files/{file}

    The file routes use config.directory.
    """
    server = HTTPServer(config)
    register_routes(server.router, server.config.directory)
    return server
