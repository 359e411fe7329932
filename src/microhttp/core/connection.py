"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Everything that happens on one accepted socket: buffered reading,
request/response cycles, keep-alive, and closing.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP does not preserve message boundaries. One request may arrive in
several recv() chunks, and one chunk may hold the tail of a request plus
the start of the next. So we buffer, and look for HTTP's own delimiters:

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /files/a.txt HTTP/1.1\r\n                                  │
    │  Content-Length: 2\r\n        ← tells us how much body follows  │
    │  \r\n                         ← end of headers                  │
    │  hi                           ← exactly Content-Length bytes    │
    └─────────────────────────────────────────────────────────────────┘

    1. Read until \r\n\r\n is buffered
    2. Find Content-Length in the header section (last one wins)
    3. Read until that many body bytes are buffered
    4. Hand exactly one message to the parser; keep any extra bytes

Without Content-Length, everything already buffered after \r\n\r\n is
the body. Nothing is held back for a next request in that case.

If the peer closes before the message is complete, whatever arrived is
handed to the parser as-is.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    AWAITING_REQUEST ──► DISPATCHING ──► RESPONDING ──┐
          ▲                   │               │        │
          │                   │               │        │ keep-alive
          └───────────────────┼───────────────┼────────┘
                              │               │
           parse error ───────┤               │ Connection: close,
           handler error ─────┤               │ write failed
           I/O error ─────────┤               │
                              ▼               ▼
                            CLOSED ◄──────────┘

- AWAITING_REQUEST: block on the socket for the next message.
  Parse error → CLOSED with NOTHING written.
- DISPATCHING: resolve the route and run the handler.
  No route → bare "404 Not Found", connection carries on.
  Handler raised → CLOSED with nothing written (unless the server runs
  with handler_errors_as_500, in which case a 500 is sent).
- RESPONDING: gzip if negotiated, add Connection: close if asked,
  serialize, write.

=============================================================================
"""

import logging
import socket
import uuid
from enum import Enum
from typing import Optional, Tuple

from ..http.compression import DEFAULT_LEVEL, maybe_compress
from ..http.request import HTTPParseError, HTTPRequest, RequestParser
from ..http.response import HTTPResponse, internal_error, not_found
from ..http.router import Router


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("microhttp.access")


HEADER_END = b"\r\n\r\n"


class ConnectionState(Enum):
    """Where a connection is in its request/response cycle."""
    AWAITING_REQUEST = "awaiting_request"
    DISPATCHING = "dispatching"
    RESPONDING = "responding"
    CLOSED = "closed"


class HandlerError(Exception):
    """
    A route handler failed.

    Wraps the handler's own exception (available as __cause__). Fatal to
    the connection: it is dropped without a response.
    """


class RequestTooLarge(ConnectionError):
    """The buffered request grew past max_request_size."""


class Connection:
    """
    Wraps one client socket with buffered reading and state tracking.

    Attributes:
        socket: The client socket (owned exclusively by this object).
        address: Client's (ip, port).
        id: Short identifier for log lines.
        state: Current ConnectionState.
        requests_handled: Responses written on this connection.

    Usage:
        with Connection(sock, addr) as conn:
            data = conn.read_request()
            conn.send_response(b"HTTP/1.1 200 OK\\r\\n\\r\\n")
        # socket closed here
    """

    def __init__(
        self,
        sock: socket.socket,
        address: Tuple[str, int],
        buffer_size: int = 2048,
        timeout: Optional[float] = None,
        max_request_size: int = 10 * 1024 * 1024,
    ):
        self.socket = sock
        self.address = address
        self.buffer_size = buffer_size
        self.max_request_size = max_request_size
        self.id = uuid.uuid4().hex[:8]
        self.state = ConnectionState.AWAITING_REQUEST
        self.requests_handled = 0
        self._buffer = b""

        # None means fully blocking
        self.socket.settimeout(timeout)

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request message.

        Returns:
            The message bytes, or None if the peer closed the connection
            with nothing buffered.

        Raises:
            RequestTooLarge: If the buffer exceeds max_request_size.
            OSError: On socket errors, including timeouts.
        """
        while HEADER_END not in self._buffer:
            if not self._fill():
                return self._take_all()

        header_end = self._buffer.find(HEADER_END)
        body_start = header_end + len(HEADER_END)
        content_length = _content_length(self._buffer[:header_end])
        if content_length is None:
            # no declared length: whatever already arrived is the body
            return self._take_all()

        while len(self._buffer) - body_start < content_length:
            if not self._fill():
                return self._take_all()

        request_end = body_start + content_length
        data = self._buffer[:request_end]
        self._buffer = self._buffer[request_end:]
        return data

    def _fill(self) -> bool:
        """recv() one chunk into the buffer. False on EOF."""
        try:
            chunk = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return False
        if not chunk:
            return False

        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(self._buffer)} bytes")
        return True

    def _take_all(self) -> Optional[bytes]:
        data, self._buffer = self._buffer, b""
        return data or None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write `data` to the client.

        sendall() keeps writing until every byte is out, unlike send().

        Returns:
            True if the write succeeded, False if the connection is gone.
        """
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False
        self.requests_handled += 1
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        shutdown(SHUT_WR) sends FIN first so the client sees a clean end
        of stream after the last response, then the descriptor is released.
        """
        if self.closed:
            return
        self.state = ConnectionState.CLOSED

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} responses")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def _content_length(header_section: bytes) -> Optional[int]:
    """
    Pull Content-Length out of a raw header section.

    Done with a plain scan because framing must happen before the full
    parse. The last occurrence wins, as in the parsed headers. Returns
    None when the header is absent; an invalid value counts as 0.
    """
    length: Optional[int] = None
    for line in header_section.split(b"\r\n")[1:]:
        name, sep, value = line.partition(b":")
        if sep and name.strip().lower() == b"content-length":
            try:
                length = max(int(value.strip()), 0)
            except ValueError:
                length = 0
    return length


class ConnectionHandler:
    """
    Runs the request/response cycle on a Connection until it closes.

    One instance is shared by every connection thread. It holds only
    read-only collaborators: a frozen Router and a stateless parser.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   handle(conn)                                                       │
    │       │                                                              │
    │       └──► loop:                                                     │
    │               read_request()  ──► None? close                        │
    │               parse()         ──► HTTPParseError? close, no reply    │
    │               dispatch()      ──► HandlerError? close, no reply      │
    │               finalize()      ──► gzip, Connection: close            │
    │               send_response() ──► failed? close                      │
    │               wants_close?    ──► close                              │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(
        self,
        router: Router,
        parser: Optional[RequestParser] = None,
        gzip_level: int = DEFAULT_LEVEL,
        handler_errors_as_500: bool = False,
    ):
        self.router = router
        self.parser = parser or RequestParser()
        self.gzip_level = gzip_level
        self.handler_errors_as_500 = handler_errors_as_500

    def __call__(self, conn: Connection) -> None:
        self.handle(conn)

    def handle(self, conn: Connection) -> None:
        """Serve requests on `conn` until it closes. Always closes it."""
        with conn:
            try:
                self._serve(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected connection error: {e}")

    def _serve(self, conn: Connection) -> None:
        while True:
            conn.state = ConnectionState.AWAITING_REQUEST
            try:
                raw = conn.read_request()
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return
            if raw is None:
                return  # client closed

            try:
                request = self.parser.parse(raw, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Dropping connection, parse error: {e}")
                return

            conn.state = ConnectionState.DISPATCHING
            try:
                response = self.dispatch(request)
            except HandlerError as e:
                logger.error(f"[{conn.id}] {e}", exc_info=e.__cause__)
                return

            conn.state = ConnectionState.RESPONDING
            self.finalize(request, response)
            _log_access(request, response)

            if not conn.send_response(response.to_bytes()):
                return
            if request.wants_close:
                return

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route `request` and run its handler.

        Returns:
            The handler's response, or a bare 404 when nothing matches.

        Raises:
            HandlerError: If the handler raised or returned something that
                          is not an HTTPResponse.
        """
        match = self.router.resolve(request.method, request.path)
        if match is None:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    f"No route for {request.method.value} {request.path}"
                    f" (allowed: {self.router.allowed_methods(request.path)})"
                )
            return not_found()

        try:
            response = match.handler(request.with_params(match.params))
            if not isinstance(response, HTTPResponse):
                raise TypeError(f"handler returned {type(response).__name__}, not HTTPResponse")
        except Exception as e:
            if self.handler_errors_as_500:
                logger.exception(f"Handler for {match.route.pattern} failed: {e}")
                return internal_error()
            raise HandlerError(
                f"Handler for {request.method.value} {match.route.pattern} failed: {e}"
            ) from e

        return response

    def finalize(self, request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
        """
        Engine-owned response adjustments, applied once per response.

        1. gzip the body if the request negotiated it
        2. echo Connection: close if the client asked to close
        """
        maybe_compress(request.headers, response, self.gzip_level)
        if request.wants_close:
            response.headers["Connection"] = "close"
        return response


def _log_access(request: HTTPRequest, response: HTTPResponse) -> None:
    ip, port = request.client_address
    access_logger.info(
        f'{ip}:{port} "{request.method.value} {request.path} '
        f'{request.version.value}" {response.status}'
    )
