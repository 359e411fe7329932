"""
=============================================================================
MICROHTTP - A SMALL HTTP/1.1 SERVER OVER RAW SOCKETS
=============================================================================

A thread-per-connection HTTP/1.1 server with a trie router, gzip content
negotiation, and a handful of built-in routes (echo, user-agent, files).
No framework underneath: sockets, bytes, and the standard library.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         CLIENT REQUEST                               │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer (core/socket_server.py)                                │
    │  • accept() loop, one daemon thread per connection                  │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  ConnectionHandler (core/connection.py)                              │
    │  • frames requests, keep-alive loop, gzip, access log               │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  RequestParser → Router → handler → HTTPResponse (http/)            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from microhttp import ServerConfig, create_app

    create_app(ServerConfig(port=4221, directory="/tmp")).run()

Or from the shell:

    python -m microhttp --directory /tmp

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
