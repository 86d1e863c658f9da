"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener: one socket, bound once, accepting clients one after another.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT           ← BindError if this fails
    3. listen()    OS starts queueing incoming connections (backlog)
    4. accept()    Wait for a client, get a NEW socket for it
    5. handle      Read, respond, close      ← on the SAME thread
    6. goto 4

=============================================================================
SERIAL ACCEPT LOOP
=============================================================================

There is no thread pool. The connection handler runs to completion before
accept() is called again:

    accept() ──► handler(conn A) ──► accept() ──► handler(conn B) ──► ...

While conn A is being handled, client B has finished its TCP handshake
with the kernel and sits in the backlog queue. It is not refused, it just
waits. A client that connects and never sends anything therefore blocks
everybody behind it (unless a read timeout is configured).

=============================================================================
STOPPING
=============================================================================

accept() is given a short timeout so the loop can notice that shutdown()
was called (from SIGINT/SIGTERM or another thread):

    while running:
        try:
            accept()          # returns within ACCEPT_POLL_INTERVAL
        except timeout:
            continue          # check running flag again

The timeout only applies to the listening socket. Client sockets get their
own timeout from the config.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..errors import BindError
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 0.5
"""Seconds accept() waits before re-checking the running flag."""


class SocketServer:
    """
    Low-level TCP listener with a serial accept loop.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind("127.0.0.1", 8080)       # BindError on failure
        server.accept_loop(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration. The socket is not created here.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the listening socket has been closed
        self._stopped_event = threading.Event()

        self._original_handlers: dict = {}

        # True while a connection handler is running
        self._handling = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address the listener is bound to.

        Before bind() this is the configured address. After bind() it is the
        real one, so port 0 resolves to the port the OS picked.
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart immediately without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses go out as soon as they are written
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)

        return sock

    def bind(self, host: str, port: int):
        """
        Bind the listening socket and start listening.

        Args:
            host: Address to bind, e.g. "127.0.0.1".
            port: Port to bind. 0 lets the OS choose.

        Raises:
            BindError: If the address is in use or otherwise unusable.
                There is no retry.
        """
        sock = self._create_socket()

        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
        except (OSError, OverflowError) as e:
            sock.close()
            logger.error(f"Failed to bind to {host}:{port}: {e}")
            raise BindError(host, port, e) from e

        self._socket = sock
        self._stopped_event.clear()

        bound_host, bound_port = self.address
        logger.info(f"Bound TCP listener socket at {bound_host} on port {bound_port}")

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into a shutdown.

        The first signal stops the loop. If it arrives while a connection is
        being handled, the handler may be blocked in recv() with no timeout,
        so KeyboardInterrupt is raised to abort it. The original handlers are
        restored either way, so a second signal gets the default behavior.

        Python only allows signal handlers in the main thread, so this is
        skipped when the server runs in a background thread (tests).
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()
            self._restore_signals()
            if self._handling:
                raise KeyboardInterrupt

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections one at a time until shutdown() is called.

        Each accepted socket is wrapped in a Connection and passed to
        ``connection_handler``, which must finish before the next accept().
        Exceptions raised by the handler are not caught here.

        Raises:
            RuntimeError: If bind() was not called first.
            OSError: If accept() fails while the server is running.
        """
        if self._socket is None:
            raise RuntimeError("accept_loop() called before bind()")

        self._running = True
        self._setup_signals()

        logger.info("Listening...")

        try:
            while self._running:
                try:
                    client_socket, client_address = self._socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if not self._running:
                        break  # Listener closed by shutdown
                    logger.error(f"Accept error: {e}")
                    raise

                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    read_size=self.config.read_size,
                    timeout=self.config.timeout,
                    drain_timeout=self.config.drain_timeout,
                )

                logger.debug(f"[{conn.id}] Connection established from {conn.client_ip}:{conn.client_port}")

                self._handling = True
                try:
                    connection_handler(conn)
                finally:
                    self._handling = False
        finally:
            self._cleanup()

    def shutdown(self):
        """
        Ask the accept loop to stop.

        The connection currently being handled (if any) is finished first.
        Safe to call multiple times and from any thread.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._stopped_event.set()
        logger.info("Socket server stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the listening socket has been closed.

        Returns:
            True if the server stopped, False on timeout.
        """
        return self._stopped_event.wait(timeout)
