"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Binds the listening socket, accepts connections, and starts one thread
per accepted connection.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor
    2. bind()      Associate it with IP:PORT
    3. listen()    Let the OS queue incoming connections (backlog)
    4. accept()    Take one queued connection → NEW socket for that client
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Thread 1  │         │ Thread 2  │         │ Thread 3  │
    │ client 1  │         │ client 2  │         │ client 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
THREAD-PER-CONNECTION
=============================================================================

Each accepted socket gets its own daemon thread running the connection
handler. A slow client blocks only its own thread, never the accept loop
or its siblings. There is no pool and no connection cap.

The threads share one object: the connection handler, which holds the
route table. The table is frozen before the first accept(), so threads
only ever read it and no locks are needed.

=============================================================================
"""

import logging
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP accept loop.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()

    The accept loop ends when:
        - shutdown() is called (quietly), or
        - accept() fails for any other reason (error is re-raised; this
          is fatal to the whole server).
    """

    # How often a blocked accept() wakes up to check for shutdown()
    POLL_INTERVAL = 0.5

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Reflects the OS-assigned port when the config asked for port 0.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def create_listener(self) -> socket.socket:
        """
        Create, bind, and listen on a TCP socket per the config.

        SO_REUSEADDR lets a restarted server bind immediately instead of
        waiting out TIME_WAIT. TCP_NODELAY disables Nagle so small
        responses go out at once.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise
        sock.listen(self.config.backlog)
        return sock

    def start(self, connection_handler: Callable[[Connection], None]):
        """Bind a listener from the config and serve on it (blocking)."""
        self.serve(self.create_listener(), connection_handler)

    def serve(
        self,
        listener: socket.socket,
        connection_handler: Callable[[Connection], None],
    ):
        """
        Accept connections on `listener` until shutdown() or an error.

        Takes ownership of `listener` and closes it on exit.
        """
        self._socket = listener
        self._socket.settimeout(self.POLL_INTERVAL)
        self._running = True

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # wake up to re-check _running
            except OSError as e:
                if not self._running:
                    break  # shutdown() closed the listener under us
                logger.error(f"Accept error: {e}")
                raise

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                sock=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )
            worker = threading.Thread(
                target=connection_handler,
                args=(conn,),
                name=f"conn-{conn.id}",
                daemon=True,
            )
            worker.start()

    def shutdown(self):
        """
        Stop accepting connections. Idempotent, callable from any thread.

        Connections already being served run to completion on their own
        threads.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is accepting. Useful in tests."""
        return self._ready.wait(timeout)

    def _cleanup(self):
        self._running = False
        self._ready.clear()
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        logger.info("Socket server stopped")
