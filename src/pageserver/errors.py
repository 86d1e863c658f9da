"""
=============================================================================
SERVER ERRORS
=============================================================================

Every failure the server knows about has its own exception type, and each
type carries a different blast radius:

    ┌──────────────────┬────────────────────────────────────────────────┐
    │ Exception        │ What happens                                   │
    ├──────────────────┼────────────────────────────────────────────────┤
    │ BindError        │ Process-fatal. The CLI logs it and exits 1.    │
    │ ReadError        │ Connection-fatal. Closed without a response.   │
    │ FileReadError    │ 500 response, or process-fatal in strict mode. │
    └──────────────────┴────────────────────────────────────────────────┘

The underlying OSError is always chained with ``raise ... from`` so the
traceback still shows what the kernel actually said.

=============================================================================
"""

from typing import Optional


class PageServerError(Exception):
    """Base class for all page server errors."""


class BindError(PageServerError):
    """
    The listening socket could not be bound.

    Typical causes: the address is already in use, the address does not
    belong to this machine, or the port needs root.

    Attributes:
        host: Address we tried to bind.
        port: Port we tried to bind.
        cause: The OSError reported by bind().
    """

    def __init__(self, host: str, port: int, cause: Optional[OSError] = None):
        self.host = host
        self.port = port
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"Failed to bind to {host}:{port}{reason}")


class ReadError(PageServerError):
    """Reading the request failed or the client sent nothing."""


class FileReadError(PageServerError):
    """
    A page file could not be loaded.

    Attributes:
        path: The file that was requested.
        cause: The OSError raised while opening or reading it.
    """

    def __init__(self, path, cause: Optional[OSError] = None):
        self.path = path
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"Failed to read {path}{reason}")
