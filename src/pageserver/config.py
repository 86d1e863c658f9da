"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the page server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m pageserver --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PAGESERVER_PORT=3000 python -m pageserver                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults reproduce the classic toy setup: 127.0.0.1:8080, a 512 byte
request buffer, no read timeout, and the two bundled HTML pages.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .http.request import REQUEST_BUFFER_SIZE, ROOT_REQUEST


PAGES_DIR = Path(__file__).parent / "pages"
"""Directory holding the bundled default pages."""

DEFAULT_SUCCESS_PAGE = PAGES_DIR / "hello.html"
DEFAULT_NOT_FOUND_PAGE = PAGES_DIR / "404.html"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the page server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog

    CONNECTION SETTINGS
    - read_size, timeout, drain_timeout

    PAGES
    - success_page, not_found_page

    ERROR HANDLING
    - strict

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. Localhost only by default."""

    port: int = 8080
    """
    The port number to listen on.
    0 asks the OS for any free port (handy in tests).
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    Connections are handled one at a time, so everything else waits here.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONNECTION SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    read_size: int = REQUEST_BUFFER_SIZE
    """
    How many bytes are read from each client, in a single recv().
    Anything past this is never looked at.
    """

    timeout: Optional[float] = None
    """
    Read timeout for a client socket in seconds.
    None = block forever. A stalled client then stalls the whole server.
    """

    drain_timeout: float = 0.5
    """Upper bound on draining unread client bytes before closing."""

    # ─────────────────────────────────────────────────────────────────────
    # PAGES
    # ─────────────────────────────────────────────────────────────────────

    success_page: Path = field(default_factory=lambda: DEFAULT_SUCCESS_PAGE)
    """File served for ``GET / HTTP/1.1``. Re-read on every request."""

    not_found_page: Path = field(default_factory=lambda: DEFAULT_NOT_FOUND_PAGE)
    """File served for every other request. Re-read on every request."""

    # ─────────────────────────────────────────────────────────────────────
    # ERROR HANDLING
    # ─────────────────────────────────────────────────────────────────────

    strict: bool = False
    """
    When True a page that cannot be read takes the whole server down.
    When False the client gets a 500 and the server keeps going.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    def __post_init__(self):
        self.success_page = Path(self.success_page)
        self.not_found_page = Path(self.not_found_page)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        PAGESERVER_HOST            Server host (default: 127.0.0.1)
        PAGESERVER_PORT            Server port (default: 8080)
        PAGESERVER_TIMEOUT         Read timeout in seconds (default: none)
        PAGESERVER_SUCCESS_PAGE    Page for GET / (default: bundled)
        PAGESERVER_NOT_FOUND_PAGE  Page for everything else (default: bundled)
        PAGESERVER_STRICT          1/true to make missing pages fatal
        PAGESERVER_LOG_LEVEL       Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("PAGESERVER_TIMEOUT")
        return cls(
            host=os.getenv("PAGESERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("PAGESERVER_PORT", "8080")),
            timeout=float(timeout) if timeout else None,
            success_page=os.getenv("PAGESERVER_SUCCESS_PAGE", str(DEFAULT_SUCCESS_PAGE)),
            not_found_page=os.getenv("PAGESERVER_NOT_FOUND_PAGE", str(DEFAULT_NOT_FOUND_PAGE)),
            strict=os.getenv("PAGESERVER_STRICT", "").lower() in _TRUE_VALUES,
            log_level=os.getenv("PAGESERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so bad values fail before the socket is bound.
        Missing page files are NOT checked here: pages are read per request
        and may legitimately appear later.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.read_size < len(ROOT_REQUEST):
            raise ValueError(f"read_size must be >= {len(ROOT_REQUEST)}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.drain_timeout <= 0:
            raise ValueError("drain_timeout must be > 0")
