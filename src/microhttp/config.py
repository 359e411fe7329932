"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m microhttp --directory /tmp/files                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DIRECTORY=/tmp/files python -m microhttp              │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    └─────────────────────────────────────────────────────────────────────┘

The file directory is the one setting the route handlers care about. It
is handed to them when the routes are registered (see create_app()), so
no handler reads global state per request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK
    - host, port, backlog, buffer_size, timeout

    HTTP
    - max_request_size, gzip_level, handler_errors_as_500

    FILES
    - directory

    LOGGING
    - log_level
    """

    host: str = "127.0.0.1"
    """Address to bind. Loopback by default."""

    port: int = 4221
    """Port to listen on. 0 lets the OS pick one (handy in tests)."""

    directory: Optional[str] = None
    """
    Base directory for GET/POST /files/{file}.
    None leaves the file routes registered but answering 404.
    """

    backlog: int = 128
    """Maximum number of queued, not-yet-accepted connections."""

    buffer_size: int = 2048
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Per-socket read/write timeout in seconds.
    None = block indefinitely (a silent client holds its thread forever).
    """

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest request (headers + body) a connection will buffer."""

    gzip_level: int = 6
    """gzip compression level, 1 (fast) to 9 (small)."""

    handler_errors_as_500: bool = False
    """
    False: a failing handler drops the connection without a response.
    True:  a failing handler yields "500 Internal Server Error" and the
           connection stays open.
    """

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 4221)
        HTTP_DIRECTORY   Base directory for file routes (default: None)
        HTTP_TIMEOUT     Socket timeout in seconds (default: none)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            directory=os.getenv("HTTP_DIRECTORY"),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fails fast at startup rather than at the first request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not 1 <= self.gzip_level <= 9:
            raise ValueError(f"gzip_level must be 1-9, got {self.gzip_level}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"Directory does not exist: {self.directory}")
