"""
=============================================================================
PAGE SERVER
=============================================================================

The orchestrator: ties the listener, the connection wrapper and the page
handler together.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection

    2. READ (same thread, nothing else is served meanwhile)
       └── One recv() of at most 512 bytes
       └── Nothing received / socket error → close, no response

    3. CLASSIFY + LOAD
       └── "GET / HTTP/1.1\\r\\n" prefix → success page, else 404 page
       └── Page unreadable → 500 (or crash the server in strict mode)

    4. WRITE
       └── status line + page bytes, sendall()

    5. CLOSE
       └── half-close, drain briefly, close
       └── back to accept()

=============================================================================
ERROR HANDLING
=============================================================================

    ┌──────────────────┬─────────────────────┬───────────────────────────┐
    │ Error            │ Scope               │ Handling                  │
    ├──────────────────┼─────────────────────┼───────────────────────────┤
    │ BindError        │ process             │ propagates out of start() │
    │ accept() OSError │ process             │ propagates out of run()   │
    │ ReadError        │ connection          │ logged, no response       │
    │ FileReadError    │ connection          │ logged, 500 response      │
    │ FileReadError    │ process (strict)    │ propagates out of run()   │
    │ send failure     │ connection          │ logged, connection closed │
    └──────────────────┴─────────────────────┴───────────────────────────┘

=============================================================================
"""

import dataclasses
import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .errors import ReadError, FileReadError
from .handlers import PageHandler
from .http import describe, internal_error


logger = logging.getLogger(__name__)


class PageServer:
    """
    Single-threaded page server.

    Example:
        server = PageServer(ServerConfig(port=8080))
        server.run()  # Blocks until Ctrl+C

    Or step by step:
        server = PageServer(config)
        server.start("127.0.0.1", 8080)
        server.accept_loop()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._pages = PageHandler(self.config.success_page, self.config.not_found_page)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port), or the configured one before start()."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def start(self, address: Optional[str] = None, port: Optional[int] = None):
        """
        Bind the listening socket.

        Args:
            address: Override config host.
            port: Override config port.

        The overrides apply to this bind only; ``self.config`` is left as is.

        Raises:
            ValueError: If an override is invalid.
            BindError: If the address cannot be bound. Not retried.
        """
        overrides = {}
        if address is not None:
            overrides["host"] = address
        if port is not None:
            overrides["port"] = port

        config = dataclasses.replace(self.config, **overrides)
        config.validate()

        self._socket_server.bind(config.host, config.port)

    def accept_loop(self):
        """
        Serve connections one at a time until shutdown().

        Raises:
            OSError: If accept() fails.
            FileReadError: In strict mode, if a page cannot be read.
        """
        self._socket_server.accept_loop(self.handle_connection)

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Configure logging, bind and serve (blocking).

        This is what the CLI calls. Errors that are fatal to the process
        propagate to the caller.
        """
        self._setup_logging()

        self.start(host, port)

        try:
            self.accept_loop()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

    def shutdown(self):
        """Stop accepting after the current connection, if any."""
        self._socket_server.shutdown()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("pageserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Handle one connection from read to close.

        Runs on the accept loop's thread; the next client is not accepted
        until this returns. The connection is always closed on return.

        Raises:
            FileReadError: Only in strict mode.
        """
        with conn:
            try:
                data = conn.read_request()
            except ReadError as e:
                logger.warning(f"[{conn.id}] {e}; closing without a response")
                return

            logger.info(f"[{conn.id}] Read {len(data)} bytes")
            logger.debug(f"[{conn.id}] Request:\n{describe(data)}")

            try:
                response = self._pages.handle(data)
            except FileReadError as e:
                if self.config.strict:
                    logger.error(f"[{conn.id}] {e}")
                    raise
                logger.error(f"[{conn.id}] {e}; sending 500")
                response = internal_error()

            if conn.send_response(response.to_bytes()):
                logger.info(f"[{conn.id}] Sent {response.status_code} ({len(response)} bytes)")

            logger.debug(f"[{conn.id}] Closing connection")
