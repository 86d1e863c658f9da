"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket. A connection lives for
exactly one request:

    ACCEPTED ──► READING ──► WRITING ──► CLOSING ──► CLOSED
                    │                       ▲
                    └── ReadError ──────────┘   (no response is written)

=============================================================================
ONE READ, NOT A REQUEST PARSER
=============================================================================

TCP is a byte stream, so a single recv() can return a partial request line,
a whole request, or several requests glued together. A real HTTP server
keeps calling recv() until it sees \\r\\n\\r\\n. This one deliberately does
NOT: it calls recv() once with a 512 byte limit and classifies whatever
came back.

    Client sends 2000 bytes
        recv(512) → first 512 bytes     ← classified
        remaining 1488 bytes            ← never looked at

=============================================================================
WHAT THE CONNECTION NEEDS FROM ITS SOCKET
=============================================================================

Connection only calls a handful of socket methods:

    recv(n)          read up to n bytes (b"" means the peer closed)
    sendall(data)    write every byte or raise
    settimeout(t)    None blocks forever
    shutdown(how)    half-close before draining
    close()          release the descriptor

Anything with those methods works, which is how the unit tests drive a
Connection with an in-memory fake instead of a real TCP socket.

=============================================================================
WHY DRAIN BEFORE CLOSING?
=============================================================================

If a socket is closed while unread bytes sit in its receive buffer, the
kernel answers with RST instead of FIN. A client that is still reading may
then see "connection reset" and lose the response it was about to read.
So close() half-closes first, reads and discards what is left for a short,
bounded time, then closes.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional
import uuid

from ..errors import ReadError
from ..http.request import REQUEST_BUFFER_SIZE


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and idempotent close."""
    ACCEPTED = "accepted"    # Just accepted, nothing read yet
    READING = "reading"      # Waiting on the single recv()
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Half-closed, draining
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    One accepted client connection.

    Owned by the handler invocation that accepted it and closed when that
    invocation finishes, normally by using the connection as a context
    manager:

        with conn:
            data = conn.read_request()
            conn.send_response(response.to_bytes())
        # closed here, even if the handler raised

    Attributes:
        socket: The client socket (or anything with the same methods).
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        bytes_read: Bytes received by read_request().
        bytes_sent: Bytes written by send_response().
    """

    # Required parameters
    socket: Any
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)
    bytes_read: int = 0
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    read_size: int = REQUEST_BUFFER_SIZE
    timeout: Optional[float] = None
    drain_timeout: float = 0.5

    def __post_init__(self):
        # None means fully blocking, which is what the classic server does
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read the request with a single recv() of at most ``read_size`` bytes.

        Returns:
            The bytes received (never empty).

        Raises:
            ReadError: If the client closed without sending anything, the
                read timed out, or the socket reported an error.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.read_size)
        except socket.timeout as e:
            raise ReadError("Request read timeout") from e
        except OSError as e:
            raise ReadError(f"Read failed: {e}") from e

        if not data:
            raise ReadError("Client closed the connection without sending a request")

        self.bytes_read = len(data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response.

        sendall() keeps writing until every byte is handed to the kernel,
        so nothing is left sitting in a user-space buffer when this returns.

        Returns:
            True if the response was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent = len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection: half-close, drain briefly, release.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """Discard unread client bytes until EOF or ``drain_timeout`` passes."""
        deadline = time.monotonic() + self.drain_timeout
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # Timeout or reset, we're closing anyway

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
