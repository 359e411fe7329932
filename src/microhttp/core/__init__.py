"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds the listening socket, runs the accept() loop               │
    │  • Starts one thread per accepted connection                        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ hands off each new socket
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Buffers the byte stream into complete request messages           │
    │  • Runs parse → route → handle → gzip → write, repeatedly           │
    │  • Keeps the socket open until Connection: close or an error        │
    └─────────────────────────────────────────────────────────────────────┘
"""

from .socket_server import SocketServer
from .connection import (
    Connection,
    ConnectionHandler,
    ConnectionState,
    HandlerError,
    RequestTooLarge,
)

__all__ = [
    "SocketServer",       # Accept loop, thread per connection
    "Connection",         # Wrapper for a client socket
    "ConnectionHandler",  # Request/response cycle on a connection
    "ConnectionState",    # Lifecycle states
    "HandlerError",       # A route handler failed
    "RequestTooLarge",    # Request over max_request_size
]
