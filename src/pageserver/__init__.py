"""
=============================================================================
PAGESERVER - A Minimal Single-Threaded HTTP Page Server
=============================================================================

The smallest thing that a browser will accept as a web server, built on raw
Python sockets:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. Bind a TCP listener (127.0.0.1:8080 by default)                │
    │   2. Accept ONE connection                                          │
    │   3. Read up to 512 bytes                                           │
    │   4. "GET / HTTP/1.1\\r\\n"?  → 200 + hello.html                      │
    │      anything else          → 404 + 404.html                        │
    │   5. Write, close, go back to 2                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No threads, no keep-alive, no header parsing, no routing.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    pageserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m pageserver)
    ├── server.py            # PageServer: start / accept_loop / handle_connection
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # BindError, ReadError, FileReadError
    ├── core/
    │   ├── socket_server.py # TCP listener and serial accept loop
    │   └── connection.py    # One client connection
    ├── http/
    │   ├── request.py       # Fixed-prefix request classification
    │   └── response.py      # Fixed status lines, Response
    ├── handlers/
    │   └── pages.py         # Success / not-found page selection
    └── pages/               # Bundled default pages

=============================================================================
QUICK START
=============================================================================

    from pageserver import PageServer, ServerConfig

    server = PageServer(ServerConfig(port=8080))
    server.run()

    $ curl -i http://127.0.0.1:8080/

=============================================================================
"""

__version__ = "1.0.0"

from .server import PageServer
from .config import ServerConfig
from .errors import PageServerError, BindError, ReadError, FileReadError

__all__ = [
    "PageServer",
    "ServerConfig",
    "PageServerError",
    "BindError",
    "ReadError",
    "FileReadError",
    "__version__",
]
